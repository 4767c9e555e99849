from datetime import timedelta

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core import mail
from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from apps.accounts.services import create_account, register_failed_attempt
from apps.accounts.validators import PasswordComplexityValidator
from apps.activity_logs.models import ActivityLog
from apps.common.factories import DEFAULT_PASSWORD, UserFactory


class PasswordPolicyTests(TestCase):
	def test_demo_passwords_satisfy_policy(self):
		for password in ("Admin@123", "Cbgv@123", "Student@123", "Admin1234"):
			validate_password(password)

	def test_rejects_passwords_missing_required_characters(self):
		for password in ("admin@123", "ADMIN@123", "Admin@abc", "Ab1"):
			with self.assertRaises(ValidationError, msg=password):
				validate_password(password)

	def test_required_unique_chars(self):
		validator = PasswordComplexityValidator(required_unique_chars=4)
		with self.assertRaises(ValidationError) as ctx:
			validator.validate("Aa1Aa1Aa")
		self.assertIn("password_requires_unique_chars", [e.code for e in ctx.exception.error_list])

	def test_symbol_is_optional(self):
		PasswordComplexityValidator().validate("Abcdefg1")
		with self.assertRaises(ValidationError):
			PasswordComplexityValidator(require_non_alphanumeric=True).validate("Abcdefg1")


class CreateAccountTests(TestCase):
	def test_creates_account_with_email_as_username(self):
		user = create_account("gv02@dnu.edu.vn", "Cbgv@456", full_name="Nguyễn Thị Hoa")
		self.assertEqual(user.username, "gv02@dnu.edu.vn")
		self.assertTrue(user.check_password("Cbgv@456"))
		self.assertTrue(user.lockout_enabled)

	def test_username_outside_allowed_characters_is_rejected(self):
		with self.assertRaises(ValidationError) as ctx:
			create_account("hoa@dnu.edu.vn", "Cbgv@456", username="nguyễn hoa")
		self.assertIn("username", ctx.exception.message_dict)
		self.assertFalse(get_user_model().objects.filter(email="hoa@dnu.edu.vn").exists())

	def test_email_must_be_unique(self):
		UserFactory(email="dup@dnu.edu.vn")
		with self.assertRaises(ValidationError) as ctx:
			create_account("dup@dnu.edu.vn", "Cbgv@456", username="dup-2")
		self.assertIn("email", ctx.exception.message_dict)

	def test_weak_password_is_rejected(self):
		with self.assertRaises(ValidationError):
			create_account("weak@dnu.edu.vn", "password")


@override_settings(EMAIL_BACKEND="django.core.mail.backends.locmem.EmailBackend")
class LoginFlowTests(TestCase):
	def setUp(self):
		self.user = UserFactory(email="gv01@dnu.edu.vn", username="gv01@dnu.edu.vn")
		self.url = reverse("accounts:login")

	def _post(self, password, **extra):
		return self.client.post(self.url, {"login": self.user.email, "password": password}, **extra)

	def test_login_page_renders(self):
		response = self.client.get(self.url)
		self.assertEqual(response.status_code, 200)
		self.assertContains(response, 'name="login"')

	def test_successful_login_redirects_home_and_logs_activity(self):
		response = self._post(DEFAULT_PASSWORD)
		self.assertRedirects(response, reverse("home:index"))
		self.assertEqual(int(self.client.session["_auth_user_id"]), self.user.pk)

		entry = ActivityLog.objects.get(user=self.user, action="login")
		self.assertEqual(entry.ip_address, "127.0.0.1")

	def test_login_by_username_and_safe_next(self):
		response = self.client.post(
			self.url,
			{"login": self.user.username, "password": DEFAULT_PASSWORD, "next": "/Home/Index/?page=1"},
		)
		self.assertRedirects(response, "/Home/Index/?page=1")

	def test_external_next_is_ignored(self):
		response = self.client.post(
			self.url,
			{"login": self.user.email, "password": DEFAULT_PASSWORD, "next": "https://evil.example.com/"},
		)
		self.assertRedirects(response, reverse("home:index"))

	def test_wrong_password_counts_failure(self):
		response = self._post("Wrong@123")
		self.assertEqual(response.status_code, 400)
		self.assertContains(response, "Mật khẩu không đúng", status_code=400)
		self.user.refresh_from_db()
		self.assertEqual(self.user.access_failed_count, 1)
		self.assertNotIn("_auth_user_id", self.client.session)

	def test_unknown_account(self):
		response = self.client.post(self.url, {"login": "nobody@dnu.edu.vn", "password": "Wrong@123"})
		self.assertContains(response, "Không tìm thấy tài khoản", status_code=400)

	def test_five_failures_lock_account_and_send_notice(self):
		for _ in range(4):
			self.assertEqual(self._post("Wrong@123").status_code, 400)
		response = self._post("Wrong@123")
		self.assertEqual(response.status_code, 403)

		self.user.refresh_from_db()
		self.assertTrue(self.user.is_locked_out)
		self.assertEqual(self.user.access_failed_count, 0)
		self.assertAlmostEqual(
			(self.user.lockout_end - timezone.now()).total_seconds(),
			timedelta(minutes=5).total_seconds(),
			delta=30,
		)
		self.assertEqual(len(mail.outbox), 1)
		self.assertIn("tạm thời bị khóa", mail.outbox[0].subject)
		self.assertEqual(mail.outbox[0].to, [self.user.email])

		# Mật khẩu đúng vẫn bị từ chối khi đang bị khóa
		response = self._post(DEFAULT_PASSWORD)
		self.assertEqual(response.status_code, 403)
		self.assertNotIn("_auth_user_id", self.client.session)

	def test_expired_lockout_allows_login_and_resets_counter(self):
		self.user.lockout_end = timezone.now() - timedelta(seconds=1)
		self.user.access_failed_count = 3
		self.user.save()

		response = self._post(DEFAULT_PASSWORD)
		self.assertRedirects(response, reverse("home:index"))
		self.user.refresh_from_db()
		self.assertEqual(self.user.access_failed_count, 0)
		self.assertIsNone(self.user.lockout_end)

	def test_lockout_disabled_user_is_never_locked(self):
		self.user.lockout_enabled = False
		self.user.save()
		for _ in range(6):
			self.assertFalse(register_failed_attempt(self.user))
		self.user.refresh_from_db()
		self.assertEqual(self.user.access_failed_count, 0)
		self.assertFalse(self.user.is_locked_out)

	def test_inactive_user_is_rejected(self):
		self.user.is_active = False
		self.user.save()
		response = self._post(DEFAULT_PASSWORD)
		self.assertEqual(response.status_code, 403)

	def test_unconfirmed_email_allowed_by_default(self):
		self.user.email_confirmed = False
		self.user.save()
		response = self._post(DEFAULT_PASSWORD)
		self.assertRedirects(response, reverse("home:index"))

	@override_settings(IDENTITY_REQUIRE_CONFIRMED_EMAIL=True)
	def test_unconfirmed_email_rejected_when_required(self):
		self.user.email_confirmed = False
		self.user.save()
		response = self._post(DEFAULT_PASSWORD)
		self.assertEqual(response.status_code, 403)

	def test_htmx_error_uses_trigger_header(self):
		response = self._post("Wrong@123", HTTP_HX_REQUEST="true")
		self.assertEqual(response.status_code, 400)
		self.assertIn("show-sweet-alert", response["HX-Trigger"])

	def test_logout_records_activity(self):
		self.client.force_login(self.user)
		response = self.client.post(reverse("accounts:logout"))
		self.assertRedirects(response, reverse("accounts:login"))
		self.assertTrue(ActivityLog.objects.filter(user=self.user, action="logout").exists())
		self.assertNotIn("_auth_user_id", self.client.session)

	def test_logout_rejects_get(self):
		self.client.force_login(self.user)
		response = self.client.get(reverse("accounts:logout"))
		self.assertEqual(response.status_code, 405)
		self.assertEqual(int(self.client.session["_auth_user_id"]), self.user.pk)
		self.assertFalse(ActivityLog.objects.filter(action="logout").exists())
