"""Account lifecycle function schemas.

Request field names follow what the web client sends (camelCase).
Required fields are declared optional so that a missing field reaches the
service and is rejected there with a 400 ``{"error": ...}`` payload.
"""

from pydantic import BaseModel, Field


class DeleteUserRequest(BaseModel):
    """Body of the delete-user function."""

    model_config = {"populate_by_name": True}

    user_id: str | None = Field(default=None, alias="userId")


class DeleteUserResponse(BaseModel):
    """Successful account deletion.

    ``deleted_records`` maps ``table.column`` to the number of rows removed;
    ``failed_tables`` lists cascade steps that failed and were skipped.
    """

    success: bool = True
    message: str
    deleted_records: dict[str, int]
    failed_tables: list[str]


class RegisterUserRequest(BaseModel):
    """Body of the register-user function."""

    model_config = {"populate_by_name": True}

    email: str | None = None
    password: str | None = None
    full_name: str | None = Field(default=None, alias="fullName")
    student_id: str | None = Field(default=None, alias="studentId")
    department: str | None = None
    faculty: str | None = None
    phone: str | None = None


class RegisterUserResponse(BaseModel):
    model_config = {"populate_by_name": True}

    success: bool = True
    message: str
    user_id: str = Field(alias="userId")
