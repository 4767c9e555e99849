from django.contrib.auth.models import AnonymousUser
from django.test import RequestFactory, TestCase

from apps.activity_logs.models import ActivityLog
from apps.common.factories import UserFactory
from apps.common.registry import get_service


class ActivityLogServiceTests(TestCase):
	def setUp(self):
		self.service = get_service("activity_log")
		self.user = UserFactory()

	def test_log_uses_forwarded_ip(self):
		request = RequestFactory().get("/", HTTP_X_FORWARDED_FOR="203.0.113.7, 10.0.0.1")
		entry = self.service.log(self.user, "login", request=request)
		self.assertEqual(entry.ip_address, "203.0.113.7")
		self.assertEqual(entry.user, self.user)

	def test_anonymous_user_is_stored_as_null(self):
		entry = self.service.log(AnonymousUser(), "login_failed")
		self.assertIsNone(entry.user)
		self.assertIsNone(entry.ip_address)

	def test_recent_filters_by_user(self):
		other = UserFactory()
		self.service.log(self.user, "login")
		self.service.log(other, "login")
		self.service.log(self.user, "logout")

		entries = self.service.recent(user=self.user)
		self.assertEqual({e.action for e in entries}, {"login", "logout"})
		self.assertEqual(ActivityLog.objects.count(), 3)
