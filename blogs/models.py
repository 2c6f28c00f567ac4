from django.db import models
from django.conf import settings


def split_tags(value):
    """Comma-separated string (or list) -> list of stripped, non-empty items."""
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(item).strip() for item in value if str(item).strip()]


class Blog(models.Model):
    """
    A health article written by a doctor (or an admin).

    New and edited blogs are PENDING until an admin verifies them; only
    VERIFIED blogs are listed publicly.
    """

    class Priority(models.TextChoices):
        HIGH = "HIGH", "High"
        NORMAL = "NORMAL", "Normal"

    class Verification(models.TextChoices):
        PENDING = "PENDING", "Pending"
        VERIFIED = "VERIFIED", "Verified"
        REJECTED = "REJECTED", "Rejected"

    title = models.CharField(max_length=255)
    author_name = models.CharField(max_length=255)
    description = models.TextField()
    summary = models.TextField(blank=True)
    author_email = models.EmailField()
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="blogs",
    )
    # Comma-separated
    categories = models.CharField(max_length=500, blank=True)
    hashtags = models.CharField(max_length=500, blank=True)
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.NORMAL)
    verification_status = models.CharField(
        max_length=20,
        choices=Verification.choices,
        default=Verification.PENDING,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.title} ({self.verification_status})"

    @property
    def category_list(self):
        return split_tags(self.categories)

    @property
    def hashtag_list(self):
        return split_tags(self.hashtags)

    def is_written_by(self, user):
        if self.author_id is not None:
            return self.author_id == user.id
        return self.author_email.lower() == user.email.lower()


class BlogComment(models.Model):
    blog = models.ForeignKey(Blog, on_delete=models.CASCADE, related_name="comments")
    username = models.CharField(max_length=255)
    comment = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"{self.username} on {self.blog.title}"
