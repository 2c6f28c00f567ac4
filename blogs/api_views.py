from django.contrib.auth import get_user_model
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Blog
from .serializers import (
    BlogCommentSerializer,
    BlogDetailSerializer,
    BlogSerializer,
    BlogWriteSerializer,
    CommentSerializer,
)
from . import services

User = get_user_model()


def _blog_not_found():
    return Response({"detail": "Blog not found."}, status=status.HTTP_404_NOT_FOUND)


class BlogListAPIView(APIView):
    """
    GET /api/blogs/?search=<term>: verified blogs, public.

    POST /api/blogs/: write a new blog (stored as PENDING).

    Request body:
        {
            "title": "Managing hypertension",
            "description": "...",
            "summary": "...",
            "categories": "Cardiology, Lifestyle",
            "hashtags": "#bp, #heart",
            "priority": "NORMAL"
        }
    """

    def get_permissions(self):
        if self.request.method == "POST":
            return [permissions.IsAuthenticated()]
        return [permissions.AllowAny()]

    def get(self, request):
        blogs = services.list_verified_blogs(request.query_params.get("search"))
        return Response({"results": BlogSerializer(blogs, many=True).data})

    def post(self, request):
        serializer = BlogWriteSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        blog = services.create_blog(request.user, serializer.validated_data)
        return Response(BlogSerializer(blog).data, status=status.HTTP_201_CREATED)


class PriorityBlogsAPIView(APIView):
    """GET /api/blogs/priority/"""

    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return Response({"results": BlogSerializer(services.priority_blogs(), many=True).data})


class MyBlogsAPIView(APIView):
    """GET /api/blogs/mine/: every blog the user wrote, any status."""

    def get(self, request):
        blogs = services.author_blogs(request.user)
        return Response({"results": BlogSerializer(blogs, many=True).data})


class BlogDetailAPIView(APIView):
    """
    GET /api/blogs/<blog_id>/: a verified blog (or one's own) with comments.

    PUT /api/blogs/<blog_id>/: author-only edit; the blog goes back to PENDING.
    """

    def get_permissions(self):
        if self.request.method == "GET":
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated()]

    def get(self, request, blog_id):
        try:
            blog = services.get_blog(blog_id, request.user)
        except Blog.DoesNotExist:
            return _blog_not_found()
        return Response(BlogDetailSerializer(blog).data)

    def put(self, request, blog_id):
        serializer = BlogWriteSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            blog = services.edit_blog(blog_id, request.user, serializer.validated_data)
        except Blog.DoesNotExist:
            return _blog_not_found()
        except services.BlogPermissionError as e:
            return Response({"detail": e.message, "code": e.code}, status=status.HTTP_403_FORBIDDEN)

        return Response(BlogSerializer(blog).data)


class BlogCommentAPIView(APIView):
    """POST /api/blogs/<blog_id>/comments/"""

    def post(self, request, blog_id):
        serializer = CommentSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            comment = services.add_comment(blog_id, request.user, serializer.validated_data["comment"])
        except Blog.DoesNotExist:
            return _blog_not_found()
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(BlogCommentSerializer(comment).data, status=status.HTTP_201_CREATED)


class AuthorInfoAPIView(APIView):
    """GET /api/blogs/authors/<author_id>/"""

    permission_classes = [permissions.AllowAny]

    def get(self, request, author_id):
        try:
            info = services.author_info(author_id)
        except User.DoesNotExist:
            return Response({"detail": "Author not found."}, status=status.HTTP_404_NOT_FOUND)
        return Response(info)
