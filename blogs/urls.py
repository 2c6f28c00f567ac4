from django.urls import path
from . import api_views

app_name = "blogs"

urlpatterns = [
    path("", api_views.BlogListAPIView.as_view(), name="api_blog_list"),
    path("priority/", api_views.PriorityBlogsAPIView.as_view(), name="api_priority_blogs"),
    path("mine/", api_views.MyBlogsAPIView.as_view(), name="api_my_blogs"),
    path("<int:blog_id>/", api_views.BlogDetailAPIView.as_view(), name="api_blog_detail"),
    path("<int:blog_id>/comments/", api_views.BlogCommentAPIView.as_view(), name="api_blog_comment"),
    path("authors/<int:author_id>/", api_views.AuthorInfoAPIView.as_view(), name="api_author_info"),
]
