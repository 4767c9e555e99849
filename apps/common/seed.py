import logging
from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.accounts import roles
from apps.accounts.models import DEFAULT_PHOTO_URL
from apps.accounts.services import create_account, find_user_by_email
from apps.staff.models import Staff
from apps.students.models import Student
from apps.units.models import Unit

logger = logging.getLogger(__name__)
User = get_user_model()

INSTITUTION_CODE = "DNU"

UNITS = [
    {
        "code": INSTITUTION_CODE,
        "name": "Đại học Đại Nam",
        "address": "Hà Nội",
        "phone": "024-12345678",
        "email": "info@dnu.edu.vn",
        "unit_type": "Trường",
    },
    {
        "code": "CNTT",
        "name": "Khoa Công nghệ thông tin",
        "address": "Hà Nội",
        "phone": "024-12345679",
        "email": "cntt@dnu.edu.vn",
        "unit_type": "Khoa",
        "parent_code": INSTITUTION_CODE,
    },
]

DEMO_ACCOUNTS = [
    {
        "email": "admin@dnu.edu.vn",
        "password": "Admin@123",
        "full_name": "Nguyễn Văn Admin",
        "role": roles.ADMIN,
        "is_staff": True,
        "is_superuser": True,
    },
    {
        "email": "gv01@dnu.edu.vn",
        "password": "Cbgv@123",
        "full_name": "Trần Thị Lan",
        "role": roles.CBGV,
    },
    {
        "email": "sv01@e.dnu.edu.vn",
        "password": "Student@123",
        "full_name": "Lê Văn Nam",
        "role": roles.SINH_VIEN,
    },
]

STAFF_PROFILE = {
    "staff_code": "GV001",
    "full_name": "Trần Thị Lan",
    "position": "Giảng viên",
    "phone": "0123456789",
    "email": "gv01@dnu.edu.vn",
    "academic_degree": "Thạc sĩ",
}

STUDENT_PROFILE = {
    "student_code": "SV2024001",
    "full_name": "Lê Văn Nam",
    "phone": "0987654321",
    "email": "sv01@e.dnu.edu.vn",
    "address": "Hà Nội",
    "class_name": "CNTT2024A",
    "enrollment_year": 2024,
}


class PendingChanges:
    """Các bản ghi chờ lưu; toàn bộ được ghi trong một transaction duy nhất khi commit()."""

    def __init__(self):
        self._objects = []

    def add(self, obj):
        self._objects.append(obj)
        return obj

    def __len__(self):
        return len(self._objects)

    def count(self, model):
        return sum(1 for obj in self._objects if isinstance(obj, model))

    def commit(self) -> int:
        # Thứ tự thêm vào là thứ tự lưu: đơn vị cha trước, hồ sơ sau
        with transaction.atomic():
            for obj in self._objects:
                obj.save()
        saved = len(self._objects)
        self._objects = []
        return saved


@dataclass
class SeedSummary:
    roles_created: int = 0
    accounts_created: int = 0
    staff_created: int = 0
    students_created: int = 0
    units_created: int = 0

    def as_dict(self):
        return {
            "roles_created": self.roles_created,
            "accounts_created": self.accounts_created,
            "staff_created": self.staff_created,
            "students_created": self.students_created,
            "units_created": self.units_created,
        }


def plan_units(pending):
    """
    Thêm các đơn vị mẫu vào ``pending`` nếu chưa có đơn vị nào.

    Trả về đơn vị gốc (mã DNU) để gắn cho hồ sơ cán bộ: bản ghi đã có trong
    DB, bản ghi đang chờ lưu, hoặc None khi DB có đơn vị nhưng thiếu mã DNU.
    """
    if Unit.objects.exists():
        print("- Units already exist, skipping")
        return Unit.objects.filter(code=INSTITUTION_CODE).first()

    planned = {}
    for data in UNITS:
        data = dict(data)
        parent_code = data.pop("parent_code", None)
        unit = Unit(**data)
        if parent_code:
            # Tra cứu đơn vị cha theo mã, không dựa vào id tự tăng
            unit.parent = planned[parent_code]
        planned[unit.code] = pending.add(unit)
    return planned[INSTITUTION_CODE]


def build_staff_profile(user, unit):
    return Staff(user=user, unit=unit, is_active=True, **STAFF_PROFILE)


def build_student_profile(user):
    return Student(user=user, is_active=True, **STUDENT_PROFILE)


def _create_demo_account(data):
    fields = {k: v for k, v in data.items() if k not in {"email", "password", "role"}}
    return create_account(
        data["email"],
        data["password"],
        is_active=True,
        email_confirmed=True,
        is_email_verified=True,
        created_at=timezone.now(),
        photo_url=DEFAULT_PHOTO_URL,
        **fields,
    )


def seed_demo_accounts(pending, institution=None):
    """Tạo tài khoản mẫu còn thiếu (tra theo email); trả về số tài khoản vừa tạo."""
    created = 0
    for data in DEMO_ACCOUNTS:
        email = data["email"]
        if find_user_by_email(email) is not None:
            continue

        try:
            user = _create_demo_account(data)
        except ValidationError as exc:
            logger.warning("Could not create demo account %s: %s", email, exc.messages)
            continue

        roles.assign_role(user, data["role"])
        created += 1

        # Hồ sơ chỉ được tạo cùng lúc với tài khoản
        if data["role"] == roles.CBGV:
            pending.add(build_staff_profile(user, institution))
        elif data["role"] == roles.SINH_VIEN:
            pending.add(build_student_profile(user))
        print(f"✓ {data['role']} user {email} created successfully!")
    return created


def seed_database():
    """
    Seed vai trò, tài khoản mẫu kèm hồ sơ và các đơn vị tổ chức.

    Vai trò và tài khoản được lưu ngay khi tạo; hồ sơ cán bộ/sinh viên và đơn
    vị chỉ được lưu ở bước commit cuối cùng.
    """
    summary = SeedSummary()
    pending = PendingChanges()

    summary.roles_created = len(roles.seed_roles())

    # Đơn vị được lên kế hoạch trước để hồ sơ cán bộ tham chiếu tới đơn vị gốc
    institution = plan_units(pending)
    summary.units_created = pending.count(Unit)

    summary.accounts_created = seed_demo_accounts(pending, institution)
    summary.staff_created = pending.count(Staff)
    summary.students_created = pending.count(Student)

    pending.commit()
    print("🎯 Database seeding completed!")
    logger.info("Database seeding completed: %s", summary.as_dict())
    return summary
