from django.contrib import admin
from .models import Blog, BlogComment


class BlogCommentInline(admin.TabularInline):
    model = BlogComment
    extra = 0


@admin.register(Blog)
class BlogAdmin(admin.ModelAdmin):
    list_display = ["title", "author_name", "author_email", "priority", "verification_status", "created_at"]
    list_filter = ["verification_status", "priority"]
    search_fields = ["title", "author_name", "author_email", "categories", "hashtags"]
    raw_id_fields = ["author"]
    inlines = [BlogCommentInline]
    actions = ["mark_verified", "mark_rejected"]

    @admin.action(description="Verify selected blogs")
    def mark_verified(self, request, queryset):
        updated = queryset.update(verification_status=Blog.Verification.VERIFIED)
        self.message_user(request, f"{updated} blog(s) verified.")

    @admin.action(description="Reject selected blogs")
    def mark_rejected(self, request, queryset):
        updated = queryset.update(verification_status=Blog.Verification.REJECTED)
        self.message_user(request, f"{updated} blog(s) rejected.")
