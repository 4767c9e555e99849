import asyncio
import importlib
import os
import sys
import tempfile
from unittest import mock, skipIf

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.exceptions import ImproperlyConfigured
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, TransactionTestCase, override_settings
from django.urls import reverse

from apps.common import seed
from apps.accounts.forms import LoginForm
from apps.common import bootstrap
from apps.common.bootstrap import (
	bootstrap_on_startup,
	last_seed_result,
	release_startup_lock,
	run_startup_seed,
)
from apps.common.factories import StaffFactory, UnitFactory, UserFactory
from apps.common.registry import get_service
from apps.common.services import EmailService
from apps.common.utils.forms import form_errors_as_text
from apps.staff.models import Staff
from apps.students.models import Student
from apps.units.models import Unit

User = get_user_model()

DEMO_ROLES = {
	"admin@dnu.edu.vn": "Admin",
	"gv01@dnu.edu.vn": "CBGV",
	"sv01@e.dnu.edu.vn": "SinhVien",
}


class SeedDatabaseTests(TestCase):
	def test_clean_run_creates_roles_accounts_profiles_and_units(self):
		summary = seed.seed_database()

		self.assertEqual(
			sorted(Group.objects.values_list("name", flat=True)),
			["Admin", "CBGV", "SinhVien"],
		)
		for email, role in DEMO_ROLES.items():
			user = User.objects.get(email=email)
			self.assertTrue(user.is_active)
			self.assertTrue(user.email_confirmed)
			self.assertTrue(user.is_email_verified)
			self.assertEqual(user.photo_url, "/images/default-avatar.png")
			self.assertEqual(list(user.groups.values_list("name", flat=True)), [role])

		gv = User.objects.get(email="gv01@dnu.edu.vn")
		staff = Staff.objects.get(user=gv)
		self.assertEqual(staff.staff_code, "GV001")
		self.assertEqual(staff.academic_degree, "Thạc sĩ")
		self.assertEqual(staff.unit.code, "DNU")
		self.assertEqual(Staff.objects.count(), 1)

		sv = User.objects.get(email="sv01@e.dnu.edu.vn")
		student = Student.objects.get(user=sv)
		self.assertEqual(student.student_code, "SV2024001")
		self.assertEqual(student.class_name, "CNTT2024A")
		self.assertEqual(student.enrollment_year, 2024)
		self.assertEqual(Student.objects.count(), 1)

		self.assertEqual(Unit.objects.count(), 2)
		cntt = Unit.objects.get(code="CNTT")
		self.assertEqual(cntt.parent.code, "DNU")
		self.assertIsNone(Unit.objects.get(code="DNU").parent)

		self.assertEqual(
			summary.as_dict(),
			{
				"roles_created": 3,
				"accounts_created": 3,
				"staff_created": 1,
				"students_created": 1,
				"units_created": 2,
			},
		)

	def test_demo_passwords_match_fixed_credentials(self):
		seed.seed_database()
		self.assertTrue(User.objects.get(email="admin@dnu.edu.vn").check_password("Admin@123"))
		self.assertTrue(User.objects.get(email="gv01@dnu.edu.vn").check_password("Cbgv@123"))
		self.assertTrue(User.objects.get(email="sv01@e.dnu.edu.vn").check_password("Student@123"))

	def test_second_run_without_reset_changes_nothing(self):
		seed.seed_database()
		summary = seed.seed_database()

		self.assertEqual(User.objects.count(), 3)
		self.assertEqual(Group.objects.count(), 3)
		self.assertEqual(Unit.objects.count(), 2)
		self.assertEqual(Staff.objects.count(), 1)
		self.assertEqual(Student.objects.count(), 1)
		self.assertEqual(set(summary.as_dict().values()), {0})

	def test_units_are_not_duplicated_when_some_exist(self):
		UnitFactory(code="KT", name="Khoa Kinh tế")
		seed.seed_database()

		self.assertEqual(list(Unit.objects.values_list("code", flat=True)), ["KT"])
		self.assertIsNone(Staff.objects.get(staff_code="GV001").unit)

	def test_staff_profile_uses_existing_institution_unit(self):
		institution = UnitFactory(code="DNU", name="Đại học Đại Nam")
		seed.seed_database()

		self.assertEqual(Unit.objects.count(), 1)
		self.assertEqual(Staff.objects.get(staff_code="GV001").unit, institution)

	def test_existing_account_never_gets_profile_or_role(self):
		user = UserFactory(email="gv01@dnu.edu.vn", username="gv01@dnu.edu.vn")
		seed.seed_database()

		self.assertEqual(User.objects.filter(email__iexact="gv01@dnu.edu.vn").count(), 1)
		self.assertFalse(Staff.objects.exists())
		self.assertFalse(user.groups.exists())

	def test_lookup_by_email_ignores_case(self):
		UserFactory(email="ADMIN@dnu.edu.vn", username="legacy-admin")
		seed.seed_database()
		self.assertEqual(User.objects.filter(email__iexact="admin@dnu.edu.vn").count(), 1)

	def test_account_failing_password_policy_is_skipped(self):
		weak = [{"email": "weak@dnu.edu.vn", "password": "weak", "full_name": "Weak", "role": "Admin"}]
		with mock.patch.object(seed, "DEMO_ACCOUNTS", weak):
			summary = seed.seed_database()

		self.assertEqual(summary.accounts_created, 0)
		self.assertFalse(User.objects.filter(email="weak@dnu.edu.vn").exists())
		self.assertEqual(Unit.objects.count(), 2)


class StartupSeedTests(TestCase):
	def test_failure_in_student_profile_does_not_stop_startup(self):
		with mock.patch("apps.common.seed.build_student_profile", side_effect=RuntimeError("boom")):
			result = run_startup_seed(reset=False, migrate=False)

		self.assertFalse(result.ok)
		self.assertEqual(result.error, "boom")
		self.assertEqual(result.error_type, "RuntimeError")
		self.assertIs(last_seed_result(), result)

		# Vai trò và tài khoản đã được lưu; hồ sơ và đơn vị chưa commit
		self.assertEqual(Group.objects.count(), 3)
		self.assertEqual(User.objects.count(), 3)
		self.assertFalse(Staff.objects.exists())
		self.assertFalse(Student.objects.exists())
		self.assertFalse(Unit.objects.exists())

		response = self.client.get("/")
		self.assertRedirects(response, reverse("accounts:login"))

		health = self.client.get(reverse("health"))
		self.assertEqual(health.status_code, 503)
		self.assertEqual(health.json()["status"], "degraded")
		self.assertEqual(health.json()["seed"]["error_type"], "RuntimeError")

	def test_successful_seed_reports_ok_health(self):
		result = run_startup_seed(reset=False, migrate=False)

		self.assertTrue(result.ok)
		self.assertEqual(result.summary.accounts_created, 3)
		health = self.client.get(reverse("health"))
		self.assertEqual(health.status_code, 200)
		self.assertEqual(health.json()["seed"]["summary"]["units_created"], 2)

	@override_settings(DNU_SEED_ON_STARTUP=False)
	def test_startup_seed_can_be_disabled(self):
		self.assertIsNone(bootstrap_on_startup())
		self.assertFalse(User.objects.exists())


class ResetDatabaseTests(TransactionTestCase):
	def test_reset_always_yields_fresh_demo_state(self):
		UserFactory.create_batch(2)
		UnitFactory(code="OLD")

		for _ in range(2):
			result = run_startup_seed(reset=True)
			self.assertTrue(result.ok, result.error)
			self.assertTrue(result.reset)
			self.assertEqual(User.objects.count(), 3)
			self.assertEqual(Group.objects.count(), 3)
			self.assertEqual(Unit.objects.count(), 2)
			self.assertEqual(Staff.objects.count(), 1)
			self.assertEqual(Student.objects.count(), 1)
			self.assertFalse(Unit.objects.filter(code="OLD").exists())

	def test_seed_db_command_with_reset(self):
		StaffFactory()
		call_command("seed_db", "--reset", verbosity=0)

		self.assertEqual(list(Staff.objects.values_list("staff_code", flat=True)), ["GV001"])

	def test_seed_db_command_without_flags_keeps_existing_data(self):
		StaffFactory(staff_code="KEEP01")
		call_command("seed_db", verbosity=0)

		self.assertEqual(
			set(Staff.objects.values_list("staff_code", flat=True)),
			{"KEEP01", "GV001"},
		)
		self.assertEqual(User.objects.filter(email__in=DEMO_ROLES).count(), 3)

	def test_seed_db_command_raises_on_failure(self):
		with mock.patch("apps.common.seed.build_staff_profile", side_effect=RuntimeError("no staff")):
			with self.assertRaises(CommandError):
				call_command("seed_db", "--reset", verbosity=0)


class FakeEmailService(EmailService):
	pass


class RegistryTests(TestCase):
	def test_registered_services_resolve(self):
		self.assertIsInstance(get_service("email"), EmailService)
		self.assertEqual(type(get_service("activity_log")).__name__, "ActivityLogService")

	def test_unknown_service_raises(self):
		with self.assertRaises(ImproperlyConfigured):
			get_service("sms")

	def test_override_rebinds_service(self):
		with override_settings(DNU_SERVICES={"email": "apps.common.tests.FakeEmailService"}):
			self.assertIsInstance(get_service("email"), FakeEmailService)
		self.assertNotIsInstance(get_service("email"), FakeEmailService)


class RouteTests(TestCase):
	def test_root_redirects_to_login(self):
		response = self.client.get("/")
		self.assertEqual(response.status_code, 302)
		self.assertEqual(response["Location"], "/Account/Login/")

	def test_account_area_defaults_to_login(self):
		response = self.client.get("/Account/")
		self.assertEqual(response.status_code, 200)
		self.assertTemplateUsed(response, "accounts/login.html")

	def test_error_page(self):
		response = self.client.get(reverse("home:error"))
		self.assertContains(response, "Đã xảy ra lỗi")

	def test_home_requires_login(self):
		response = self.client.get(reverse("home:index"))
		self.assertRedirects(
			response,
			f"{reverse('accounts:login')}?next={reverse('home:index')}",
			fetch_redirect_response=False,
		)


class HomeIndexTests(TestCase):
	def setUp(self):
		self.user = UserFactory()
		self.client.force_login(self.user)

	def test_lists_staff_contacts(self):
		StaffFactory(full_name="Trần Thị Lan", staff_code="GV001")
		StaffFactory(full_name="Phạm Minh Đức", staff_code="GV002")

		response = self.client.get(reverse("home:index"))
		self.assertContains(response, "Trần Thị Lan")
		self.assertContains(response, "Phạm Minh Đức")

	def test_filters_by_search_and_unit(self):
		cntt = UnitFactory(code="CNTT")
		StaffFactory(full_name="Trần Thị Lan", staff_code="GV001", unit=cntt)
		StaffFactory(full_name="Phạm Minh Đức", staff_code="GV002")

		response = self.client.get(reverse("home:index"), {"q": "GV001"})
		self.assertEqual([s.staff_code for s in response.context["staff_list"]], ["GV001"])

		response = self.client.get(reverse("home:index"), {"unit": cntt.pk})
		self.assertEqual([s.staff_code for s in response.context["staff_list"]], ["GV001"])

	def test_inactive_staff_are_hidden(self):
		StaffFactory(full_name="Trần Thị Lan", staff_code="GV001")
		StaffFactory(full_name="Phạm Minh Đức", staff_code="GV002", is_active=False)

		response = self.client.get(reverse("home:index"))
		self.assertEqual([s.staff_code for s in response.context["staff_list"]], ["GV001"])

	def test_admin_link_only_for_admin_group(self):
		response = self.client.get(reverse("home:index"))
		self.assertNotContains(response, reverse("admin:index"))

		self.user.groups.add(Group.objects.create(name="Admin"))
		response = self.client.get(reverse("home:index"))
		self.assertContains(response, reverse("admin:index"))


class FormErrorsTextTests(TestCase):
	def test_errors_are_prefixed_with_field_labels(self):
		form = LoginForm(data={})
		self.assertFalse(form.is_valid())

		lines = form_errors_as_text(form).split("\n")
		self.assertEqual(
			[line.split(":")[0] for line in lines],
			["Email hoặc tên đăng nhập", "Mật khẩu"],
		)

	def test_valid_form_returns_fallback(self):
		form = LoginForm(data={"login": "gv01@dnu.edu.vn", "password": "x"})
		self.assertTrue(form.is_valid())
		self.assertEqual(form_errors_as_text(form, "Không có lỗi"), "Không có lỗi")


class StartupEntryPointTests(TransactionTestCase):
	def setUp(self):
		tmp = tempfile.TemporaryDirectory()
		self.addCleanup(tmp.cleanup)
		self.lock_path = os.path.join(tmp.name, "dnucontact.db.startup.lock")
		self.addCleanup(release_startup_lock)

	def _settings(self, **extra):
		return override_settings(**{
			"DNU_SEED_ON_STARTUP": True,
			"DNU_RESET_DATABASE_ON_STARTUP": False,
			"DNU_STARTUP_LOCK_PATH": self.lock_path,
			**extra,
		})

	def test_asgi_import_inside_event_loop_seeds_database(self):
		sys.modules.pop("dnu_contact.asgi", None)
		self.addCleanup(sys.modules.pop, "dnu_contact.asgi", None)

		async def serve():
			# uvicorn nạp ứng dụng khi event loop đang chạy
			importlib.import_module("dnu_contact.asgi")

		with self._settings():
			asyncio.run(serve())

		result = last_seed_result()
		self.assertTrue(result.ok, result.error)
		self.assertFalse(result.skipped)
		self.assertEqual(User.objects.filter(email__in=DEMO_ROLES).count(), 3)
		self.assertEqual(Unit.objects.count(), 2)

	def test_startup_without_event_loop_runs_inline(self):
		with self._settings():
			result = bootstrap_on_startup()

		self.assertTrue(result.ok, result.error)
		self.assertEqual(result.summary.accounts_created, 3)

	@skipIf(bootstrap.fcntl is None, "fcntl không khả dụng")
	def test_worker_keeps_shared_lock_after_seeding(self):
		import fcntl

		with self._settings():
			bootstrap_on_startup()

		with open(self.lock_path, "a+") as other_worker:
			with self.assertRaises(BlockingIOError):
				fcntl.flock(other_worker, fcntl.LOCK_EX | fcntl.LOCK_NB)
			# Các worker khác vẫn lấy được khóa chia sẻ
			fcntl.flock(other_worker, fcntl.LOCK_SH | fcntl.LOCK_NB)
			fcntl.flock(other_worker, fcntl.LOCK_UN)

	@skipIf(bootstrap.fcntl is None, "fcntl không khả dụng")
	def test_second_worker_skips_reset_while_first_is_serving(self):
		import fcntl

		UnitFactory(code="KEEP")
		with open(self.lock_path, "a+") as first_worker:
			fcntl.flock(first_worker, fcntl.LOCK_SH)
			with self._settings(DNU_RESET_DATABASE_ON_STARTUP=True):
				result = bootstrap_on_startup()
			fcntl.flock(first_worker, fcntl.LOCK_UN)

		self.assertTrue(result.ok)
		self.assertTrue(result.skipped)
		self.assertFalse(result.reset)
		self.assertIs(last_seed_result(), result)
		self.assertTrue(Unit.objects.filter(code="KEEP").exists())
		self.assertFalse(User.objects.filter(email__in=DEMO_ROLES).exists())
