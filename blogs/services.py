"""
Blog publishing: doctors write, admins verify, everyone reads.
"""

import logging

from django.contrib.auth import get_user_model
from django.db.models import Q

from .models import Blog, BlogComment, split_tags

logger = logging.getLogger(__name__)

User = get_user_model()


class BlogPermissionError(Exception):
    def __init__(self, message="Only the author can edit this blog."):
        self.message = message
        self.code = "forbidden"
        super().__init__(self.message)


def _join(value):
    return ",".join(split_tags(value))


def create_blog(user, data):
    """
    Store a new blog as PENDING.

    ``author`` is linked only when the user has a doctor profile; the
    author email always comes from the logged-in user.
    """
    author = user if hasattr(user, "doctor_profile") else None

    blog = Blog.objects.create(
        title=data["title"],
        author_name=data.get("author_name") or user.name,
        description=data["description"],
        summary=data.get("summary", ""),
        author_email=user.email,
        author=author,
        categories=_join(data.get("categories")),
        hashtags=_join(data.get("hashtags")),
        priority=data.get("priority") or Blog.Priority.NORMAL,
        verification_status=Blog.Verification.PENDING,
    )
    logger.info("[BLOG] Created blog_id=%s author_email=%s", blog.id, blog.author_email)
    return blog


def edit_blog(blog_id, user, data):
    """
    Update an author's own blog and send it back for review.

    Raises:
        Blog.DoesNotExist: Unknown blog.
        BlogPermissionError: ``user`` is not the author.
    """
    blog = Blog.objects.get(id=blog_id)
    if not blog.is_written_by(user):
        raise BlogPermissionError()

    for field in ("title", "description", "summary"):
        if field in data:
            setattr(blog, field, data[field])
    if "categories" in data:
        blog.categories = _join(data["categories"])
    if "hashtags" in data:
        blog.hashtags = _join(data["hashtags"])

    blog.verification_status = Blog.Verification.PENDING
    blog.save()

    logger.info("[BLOG] Edited blog_id=%s by user_id=%s, back to PENDING", blog.id, user.id)
    return blog


def get_blog(blog_id, user=None):
    """A VERIFIED blog, or any blog when ``user`` wrote it."""
    blog = Blog.objects.prefetch_related("comments").get(id=blog_id)
    if blog.verification_status == Blog.Verification.VERIFIED:
        return blog
    if user is not None and user.is_authenticated and blog.is_written_by(user):
        return blog
    raise Blog.DoesNotExist()


def list_verified_blogs(search=None):
    qs = Blog.objects.filter(verification_status=Blog.Verification.VERIFIED)
    search = (search or "").strip()
    if search:
        # icontains escapes LIKE wildcards, so the term is matched literally
        qs = qs.filter(
            Q(title__icontains=search)
            | Q(categories__icontains=search)
            | Q(hashtags__icontains=search)
        )
    return qs


def priority_blogs():
    return Blog.objects.filter(
        priority=Blog.Priority.HIGH,
        verification_status=Blog.Verification.VERIFIED,
    )


def author_blogs(user):
    return Blog.objects.filter(author_email__iexact=user.email)


def add_comment(blog_id, user, comment):
    """
    Raises:
        Blog.DoesNotExist: Unknown blog.
        ValueError: Empty comment.
    """
    blog = Blog.objects.get(id=blog_id)
    comment = (comment or "").strip()
    if not comment:
        raise ValueError("Comment cannot be empty.")
    return BlogComment.objects.create(blog=blog, username=user.name, comment=comment)


def author_info(author_id):
    """
    Public card for a blog author (doctor or admin).

    Raises:
        User.DoesNotExist: No doctor or admin with that id.
    """
    author = User.objects.get(id=author_id, role__in=["DOCTOR", "ADMIN"])
    return {
        "id": author.id,
        "name": author.name,
        "email": author.email,
        "role": author.role,
        "blog_count": Blog.objects.filter(author_id=author.id).count(),
    }
