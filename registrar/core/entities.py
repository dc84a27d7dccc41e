"""
Data model for the Registrar service.

Every resource is described by three pydantic models and one definition:

* a *create* model, where required fields are enforced and typed parsing
  happens (``grade`` must be an integer, ``mark`` a finite number, ...);
* a *patch* model, where every field is optional so that fields the caller
  did not send can be told apart from fields sent as ``null``;
* a *record* model describing what the API returns;
* a ``ResourceDefinition`` tying them to the resource's reference fields and
  the dependency guards checked before a delete.
"""

from dataclasses import dataclass
import datetime
from typing import Annotated, Any, Dict, Optional, Tuple, Type, Union

from pydantic import BaseModel, Field, StringConstraints, TypeAdapter, ValidationError, field_validator

from .enums import ResourceType


# Reference ids are integers on the file backend and ObjectId strings on MongoDB;
# the repository converts them to its native form.
ReferenceId = Union[int, Annotated[str, StringConstraints(min_length=1)]]

_DATE_ADAPTERS = (TypeAdapter(datetime.date), TypeAdapter(datetime.datetime))


def _reject_null(value: Any) -> Any:
    if value is None:
        raise ValueError("field may not be null")
    return value


def _reject_bool(value: Any) -> Any:
    # JSON true/false would otherwise pass as 1/0
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    return value


def _iso_date(value: Any) -> Any:
    """Normalize a calendar date or a full timestamp to its ISO string."""
    if value is None:
        return value
    if isinstance(value, datetime.date):
        return value.isoformat()
    if not isinstance(value, str):
        raise ValueError("date must be an ISO string")
    for adapter in _DATE_ADAPTERS:
        try:
            return adapter.validate_python(value).isoformat()
        except ValidationError:
            continue
    raise ValueError("invalid ISO date")


# Teachers
class TeacherCreate(BaseModel):
    firstName: str = Field(..., min_length=1)
    lastName: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    department: str = Field(..., min_length=1)
    room: Optional[str] = ""


class TeacherPatch(BaseModel):
    firstName: Optional[str] = Field(None, min_length=1)
    lastName: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = Field(None, min_length=1)
    department: Optional[str] = Field(None, min_length=1)
    room: Optional[str] = None

    @field_validator("firstName", "lastName", "email", "department")
    @classmethod
    def required_not_null(cls, value):
        return _reject_null(value)


class TeacherRecord(BaseModel):
    id: ReferenceId
    firstName: str
    lastName: str
    email: str
    department: str
    room: str = ""


# Courses
class CourseCreate(BaseModel):
    code: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    teacherId: ReferenceId
    semester: str = Field(..., min_length=1)
    room: str = Field(..., min_length=1)
    schedule: Optional[str] = ""


class CoursePatch(BaseModel):
    code: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = Field(None, min_length=1)
    teacherId: Optional[ReferenceId] = None
    semester: Optional[str] = Field(None, min_length=1)
    room: Optional[str] = Field(None, min_length=1)
    schedule: Optional[str] = None

    @field_validator("code", "name", "teacherId", "semester", "room")
    @classmethod
    def required_not_null(cls, value):
        return _reject_null(value)


class CourseRecord(BaseModel):
    id: ReferenceId
    code: str
    name: str
    teacherId: Union[TeacherRecord, ReferenceId]
    semester: str
    room: str
    schedule: str = ""


# Students
class StudentCreate(BaseModel):
    firstName: str = Field(..., min_length=1)
    lastName: str = Field(..., min_length=1)
    grade: int
    studentNumber: str = Field(..., min_length=1)
    homeroom: Optional[str] = ""

    @field_validator("grade", mode="before")
    @classmethod
    def grade_not_boolean(cls, value):
        return _reject_bool(value)


class StudentPatch(BaseModel):
    firstName: Optional[str] = Field(None, min_length=1)
    lastName: Optional[str] = Field(None, min_length=1)
    grade: Optional[int] = None
    studentNumber: Optional[str] = Field(None, min_length=1)
    homeroom: Optional[str] = None

    @field_validator("firstName", "lastName", "grade", "studentNumber")
    @classmethod
    def required_not_null(cls, value):
        return _reject_null(value)

    @field_validator("grade", mode="before")
    @classmethod
    def grade_not_boolean(cls, value):
        return _reject_bool(value)


class StudentRecord(BaseModel):
    id: ReferenceId
    firstName: str
    lastName: str
    grade: int
    studentNumber: str
    homeroom: str = ""


# Tests
class TestCreate(BaseModel):
    studentId: ReferenceId
    courseId: ReferenceId
    testName: str = Field(..., min_length=1)
    date: str
    mark: float = Field(..., allow_inf_nan=False)
    outOf: float = Field(..., allow_inf_nan=False)
    weight: Optional[float] = Field(None, allow_inf_nan=False)

    @field_validator("mark", "outOf", "weight", mode="before")
    @classmethod
    def numbers_not_boolean(cls, value):
        return _reject_bool(value)

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value):
        return _iso_date(value)


class TestPatch(BaseModel):
    studentId: Optional[ReferenceId] = None
    courseId: Optional[ReferenceId] = None
    testName: Optional[str] = Field(None, min_length=1)
    date: Optional[str] = None
    mark: Optional[float] = Field(None, allow_inf_nan=False)
    outOf: Optional[float] = Field(None, allow_inf_nan=False)
    weight: Optional[float] = Field(None, allow_inf_nan=False)

    @field_validator("studentId", "courseId", "testName", "date", "mark", "outOf")
    @classmethod
    def required_not_null(cls, value):
        return _reject_null(value)

    @field_validator("mark", "outOf", "weight", mode="before")
    @classmethod
    def numbers_not_boolean(cls, value):
        return _reject_bool(value)

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value):
        return _iso_date(value)


class TestRecord(BaseModel):
    id: ReferenceId
    studentId: Union[StudentRecord, ReferenceId]
    courseId: Union[CourseRecord, ReferenceId]
    testName: str
    date: str
    mark: float
    outOf: float
    weight: Optional[float] = None


@dataclass(frozen=True)
class Reference:
    """A field on one resource holding the id of a record of another."""
    field: str
    target: ResourceType


@dataclass(frozen=True)
class DependencyGuard:
    """Blocks deleting a record while ``dependent`` records point at it through ``field``."""
    dependent: ResourceType
    field: str
    message: str


@dataclass(frozen=True)
class ResourceDefinition:
    resource_type: ResourceType
    label: str
    create_model: Type[BaseModel]
    patch_model: Type[BaseModel]
    record_model: Type[BaseModel]
    references: Tuple[Reference, ...] = ()
    guards: Tuple[DependencyGuard, ...] = ()

    @property
    def name(self) -> str:
        return self.resource_type.value

    @property
    def reference_fields(self) -> Tuple[str, ...]:
        return tuple(ref.field for ref in self.references)

    @property
    def not_found_message(self) -> str:
        return f"{self.label} not found"

    @property
    def deleted_message(self) -> str:
        return f"{self.label} deleted"

    def optional_defaults(self) -> Dict[str, Any]:
        """Values an optional field takes when it is reset to null by a patch."""
        defaults = {}
        for name, field in self.create_model.model_fields.items():
            if not field.is_required():
                defaults[name] = field.default
        return defaults


RESOURCES: Dict[ResourceType, ResourceDefinition] = {
    ResourceType.TEACHER: ResourceDefinition(
        resource_type=ResourceType.TEACHER,
        label="Teacher",
        create_model=TeacherCreate,
        patch_model=TeacherPatch,
        record_model=TeacherRecord,
        guards=(
            DependencyGuard(ResourceType.COURSE, "teacherId", "Cannot delete teacher assigned to a course"),
        ),
    ),
    ResourceType.COURSE: ResourceDefinition(
        resource_type=ResourceType.COURSE,
        label="Course",
        create_model=CourseCreate,
        patch_model=CoursePatch,
        record_model=CourseRecord,
        references=(Reference("teacherId", ResourceType.TEACHER),),
        guards=(
            DependencyGuard(ResourceType.TEST, "courseId", "Cannot delete course with existing tests"),
        ),
    ),
    ResourceType.STUDENT: ResourceDefinition(
        resource_type=ResourceType.STUDENT,
        label="Student",
        create_model=StudentCreate,
        patch_model=StudentPatch,
        record_model=StudentRecord,
        guards=(
            DependencyGuard(ResourceType.TEST, "studentId", "Cannot delete student with existing tests"),
        ),
    ),
    ResourceType.TEST: ResourceDefinition(
        resource_type=ResourceType.TEST,
        label="Test",
        create_model=TestCreate,
        patch_model=TestPatch,
        record_model=TestRecord,
        references=(
            Reference("studentId", ResourceType.STUDENT),
            Reference("courseId", ResourceType.COURSE),
        ),
    ),
}


def get_definition(resource_type: ResourceType) -> ResourceDefinition:
    return RESOURCES[resource_type]


def _fill_nulls(fields: Dict[str, Any], definition: ResourceDefinition) -> Dict[str, Any]:
    defaults = definition.optional_defaults()
    for name, value in fields.items():
        if value is None and name in defaults:
            fields[name] = defaults[name]
    return fields


def create_fields(payload: BaseModel, definition: ResourceDefinition) -> Dict[str, Any]:
    """Full field set of a new record, JSON-ready (dates as ISO strings)."""
    return _fill_nulls(payload.model_dump(mode="json"), definition)


def patch_fields(payload: BaseModel, definition: ResourceDefinition) -> Dict[str, Any]:
    """Only the fields the caller actually sent; nulls on optional fields become their defaults."""
    return _fill_nulls(payload.model_dump(mode="json", exclude_unset=True), definition)
