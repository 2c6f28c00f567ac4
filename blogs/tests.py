from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient
from rest_framework import status

from accounts.services import register_user
from .models import Blog, BlogComment
from . import services


class BlogTestMixin:
    def setUp(self):
        self.doctor = register_user(
            email="ahmad@example.com", name="Ahmad Saleh", password="testpass123", role="DOCTOR"
        )
        self.other_doctor = register_user(
            email="sara@example.com", name="Sara Klein", password="testpass123", role="DOCTOR"
        )
        self.patient = register_user(
            email="ali@example.com", name="Patient Ali", password="testpass123"
        )
        self.blog = services.create_blog(
            self.doctor,
            {
                "title": "Living with hypertension",
                "description": "Long form text",
                "summary": "Short",
                "categories": "Cardiology, Lifestyle",
                "hashtags": ["#bp", " #heart "],
                "priority": Blog.Priority.HIGH,
            },
        )

    def _verify(self, blog):
        Blog.objects.filter(id=blog.id).update(verification_status=Blog.Verification.VERIFIED)
        blog.refresh_from_db()
        return blog


class BlogServiceTests(BlogTestMixin, TestCase):

    def test_create_is_pending_and_linked_to_doctor(self):
        self.assertEqual(self.blog.verification_status, Blog.Verification.PENDING)
        self.assertEqual(self.blog.author, self.doctor)
        self.assertEqual(self.blog.author_email, "ahmad@example.com")
        self.assertEqual(self.blog.author_name, "Ahmad Saleh")
        self.assertEqual(self.blog.categories, "Cardiology,Lifestyle")
        self.assertEqual(self.blog.hashtag_list, ["#bp", "#heart"])

    def test_create_by_admin_has_no_author_link(self):
        admin = register_user(
            email="admin@example.com", name="Admin", password="testpass123", role="ADMIN"
        )
        blog = services.create_blog(admin, {"title": "Notice", "description": "Body"})
        self.assertIsNone(blog.author)
        self.assertEqual(blog.author_email, "admin@example.com")

    def test_edit_resets_to_pending(self):
        self._verify(self.blog)

        blog = services.edit_blog(
            self.blog.id, self.doctor, {"title": "Updated", "categories": "A, B ,,C"}
        )

        self.assertEqual(blog.title, "Updated")
        self.assertEqual(blog.category_list, ["A", "B", "C"])
        self.assertEqual(blog.verification_status, Blog.Verification.PENDING)

    def test_edit_by_other_doctor_forbidden(self):
        with self.assertRaises(services.BlogPermissionError):
            services.edit_blog(self.blog.id, self.other_doctor, {"title": "Hijack"})
        self.blog.refresh_from_db()
        self.assertEqual(self.blog.title, "Living with hypertension")

    def test_search_is_literal_and_case_insensitive(self):
        self._verify(self.blog)
        services.create_blog(self.other_doctor, {"title": "Skin care 100%", "description": "x"})
        skin = Blog.objects.get(title="Skin care 100%")
        self._verify(skin)

        self.assertEqual(list(services.list_verified_blogs("LIFESTYLE")), [self.blog])
        self.assertEqual(list(services.list_verified_blogs("#HEART")), [self.blog])
        self.assertEqual(list(services.list_verified_blogs("100%")), [skin])
        # Wildcard characters do not match everything
        self.assertEqual(list(services.list_verified_blogs("%")), [skin])
        self.assertEqual(list(services.list_verified_blogs(".*")), [])
        self.assertEqual(len(services.list_verified_blogs("")), 2)

    def test_unverified_blogs_hidden(self):
        self.assertEqual(list(services.list_verified_blogs()), [])
        self.assertEqual(list(services.priority_blogs()), [])

    def test_priority_blogs(self):
        self._verify(self.blog)
        normal = services.create_blog(self.doctor, {"title": "Normal", "description": "x"})
        self._verify(normal)
        self.assertEqual(list(services.priority_blogs()), [self.blog])

    def test_author_blogs_any_status(self):
        self.assertEqual(list(services.author_blogs(self.doctor)), [self.blog])
        self.assertEqual(list(services.author_blogs(self.other_doctor)), [])

    def test_comment_uses_user_name(self):
        comment = services.add_comment(self.blog.id, self.patient, "Very helpful")
        self.assertEqual(comment.username, "Patient Ali")

        with self.assertRaises(ValueError):
            services.add_comment(self.blog.id, self.patient, "  ")

    def test_author_info(self):
        info = services.author_info(self.doctor.id)
        self.assertEqual(info["name"], "Ahmad Saleh")
        self.assertEqual(info["blog_count"], 1)

        with self.assertRaises(services.User.DoesNotExist):
            services.author_info(self.patient.id)


class BlogAPITests(BlogTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.client = APIClient()

    def test_public_list(self):
        self._verify(self.blog)
        response = self.client.get(reverse("blogs:api_blog_list"), {"search": "cardio"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["results"][0]["categories"], ["Cardiology", "Lifestyle"])

    def test_create_requires_auth(self):
        response = self.client.post(
            reverse("blogs:api_blog_list"), {"title": "T", "description": "D"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create(self):
        self.client.force_authenticate(user=self.other_doctor)
        response = self.client.post(
            reverse("blogs:api_blog_list"),
            {"title": "Eczema basics", "description": "D", "hashtags": "#skin, #care"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["verification_status"], "PENDING")
        self.assertEqual(response.data["hashtags"], ["#skin", "#care"])

    def test_edit_forbidden_for_non_author(self):
        self.client.force_authenticate(user=self.other_doctor)
        response = self.client.put(
            reverse("blogs:api_blog_detail", kwargs={"blog_id": self.blog.id}),
            {"title": "Hijack"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_edit_by_author(self):
        self._verify(self.blog)
        self.client.force_authenticate(user=self.doctor)
        response = self.client.put(
            reverse("blogs:api_blog_detail", kwargs={"blog_id": self.blog.id}),
            {"hashtags": "#new"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["hashtags"], ["#new"])
        self.assertEqual(response.data["verification_status"], "PENDING")

    def test_pending_detail_only_for_author(self):
        url = reverse("blogs:api_blog_detail", kwargs={"blog_id": self.blog.id})
        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(user=self.doctor)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_200_OK)

    def test_comment(self):
        self._verify(self.blog)
        self.client.force_authenticate(user=self.patient)
        response = self.client.post(
            reverse("blogs:api_blog_comment", kwargs={"blog_id": self.blog.id}),
            {"comment": "Thanks!"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(BlogComment.objects.get().username, "Patient Ali")

        response = self.client.get(reverse("blogs:api_blog_detail", kwargs={"blog_id": self.blog.id}))
        self.assertEqual(response.data["comments"][0]["comment"], "Thanks!")

    def test_author_info_endpoint(self):
        response = self.client.get(reverse("blogs:api_author_info", kwargs={"author_id": self.doctor.id}))
        self.assertEqual(response.data["blog_count"], 1)

        response = self.client.get(reverse("blogs:api_author_info", kwargs={"author_id": self.patient.id}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_doctor_home_shows_priority_blogs(self):
        self._verify(self.blog)
        self.client.force_authenticate(user=self.doctor)
        response = self.client.get(reverse("doctors:api_doctor_home"))
        self.assertEqual([b["id"] for b in response.data["blogs"]], [self.blog.id])
