from django.test import TestCase
from django.urls import reverse

from apps.common.factories import StudentFactory, UserFactory
from apps.students.models import Student


class StudentDirectoryTests(TestCase):
	def setUp(self):
		self.nam = StudentFactory(student_code="SV2024001", full_name="Lê Văn Nam")
		self.hoa = StudentFactory(student_code="SV2024002", full_name="Nguyễn Thị Hoa", is_active=False)

	def test_active_excludes_disabled_students(self):
		self.assertEqual(list(Student.objects.active()), [self.nam])
		self.assertEqual(str(self.nam), "SV2024001 - Lê Văn Nam")

	def test_admin_changelist_searches_by_code(self):
		admin = UserFactory(is_staff=True, is_superuser=True)
		self.client.force_login(admin)

		response = self.client.get(reverse("admin:students_student_changelist"), {"q": "SV2024002"})
		self.assertEqual(response.status_code, 200)
		self.assertContains(response, "Nguyễn Thị Hoa")
		self.assertNotContains(response, "Lê Văn Nam")
