from rest_framework import serializers
from .models import Blog, BlogComment


class BlogCommentSerializer(serializers.ModelSerializer):
    class Meta:
        model = BlogComment
        fields = ["id", "username", "comment", "created_at"]


class BlogSerializer(serializers.ModelSerializer):
    categories = serializers.ListField(source="category_list", read_only=True)
    hashtags = serializers.ListField(source="hashtag_list", read_only=True)

    class Meta:
        model = Blog
        fields = [
            "id",
            "title",
            "author_name",
            "author",
            "author_email",
            "summary",
            "description",
            "categories",
            "hashtags",
            "priority",
            "verification_status",
            "created_at",
            "updated_at",
        ]


class BlogDetailSerializer(BlogSerializer):
    comments = BlogCommentSerializer(many=True, read_only=True)

    class Meta(BlogSerializer.Meta):
        fields = BlogSerializer.Meta.fields + ["comments"]


class TagsField(serializers.Field):
    """Accepts "a, b" or ["a", "b"]; left for the service to split."""

    def to_internal_value(self, data):
        if isinstance(data, (str, list)):
            return data
        raise serializers.ValidationError("Expected a comma-separated string or a list.")


class BlogWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    author_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    description = serializers.CharField()
    summary = serializers.CharField(required=False, allow_blank=True)
    categories = TagsField(required=False)
    hashtags = TagsField(required=False)
    priority = serializers.ChoiceField(choices=Blog.Priority.choices, required=False)


class CommentSerializer(serializers.Serializer):
    comment = serializers.CharField(allow_blank=True)
