import factory
from factory import SubFactory
from faker import Faker
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.staff.models import Staff
from apps.students.models import Student
from apps.units.models import Unit

User = get_user_model()
fake = Faker("vi_VN")

DEFAULT_PASSWORD = "Password@123"


def _safe_digits(s, max_len=20):
    digits = ''.join(ch for ch in str(s) if ch.isdigit())
    return digits[:max_len]


def _safe_text(s, max_len):
    return str(s)[:max_len]


class UnitFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Unit
        django_get_or_create = ("code",)

    name = factory.LazyAttribute(lambda o: _safe_text(f"Khoa {fake.word().capitalize()}", 255))
    code = factory.Sequence(lambda n: f"UNIT{n:03d}")
    address = factory.LazyAttribute(lambda o: _safe_text(fake.address(), 255))
    phone = factory.LazyAttribute(lambda o: _safe_digits(fake.phone_number(), 20))
    email = factory.Sequence(lambda n: f"unit{n:03d}@dnu.edu.vn")
    unit_type = "Khoa"
    parent = None


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User
        skip_postgeneration_save = True

    email = factory.Sequence(lambda n: f"user{n:05d}@dnu.edu.vn")
    username = factory.LazyAttribute(lambda o: o.email)
    password = factory.django.Password(DEFAULT_PASSWORD)
    full_name = factory.LazyAttribute(lambda o: _safe_text(fake.name(), 255))
    is_active = True
    email_confirmed = True
    is_email_verified = True
    created_at = factory.LazyFunction(timezone.now)

    @factory.post_generation
    def groups(self, create, extracted, **kwargs):
        if not create or not extracted:
            return
        for g in extracted:
            self.groups.add(g)


class StaffFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Staff

    user = SubFactory(UserFactory)
    staff_code = factory.Sequence(lambda n: f"GV{n + 100:03d}")
    full_name = factory.LazyAttribute(lambda o: o.user.full_name)
    position = "Giảng viên"
    phone = factory.LazyAttribute(lambda o: _safe_digits(fake.phone_number(), 20))
    email = factory.LazyAttribute(lambda o: o.user.email)
    academic_degree = factory.LazyAttribute(lambda o: fake.random_element(["Cử nhân", "Thạc sĩ", "Tiến sĩ"]))
    unit = SubFactory(UnitFactory)


class StudentFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Student

    user = SubFactory(UserFactory)
    student_code = factory.Sequence(lambda n: f"SV2024{n + 100:03d}")
    full_name = factory.LazyAttribute(lambda o: o.user.full_name)
    phone = factory.LazyAttribute(lambda o: _safe_digits(fake.phone_number(), 20))
    email = factory.LazyAttribute(lambda o: o.user.email)
    address = "Hà Nội"
    class_name = "CNTT2024A"
    enrollment_year = 2024
