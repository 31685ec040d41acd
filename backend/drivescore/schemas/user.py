from pydantic import BaseModel, ConfigDict, Field


class UserUpsertIn(BaseModel):
    email: str | None = Field(default=None, max_length=255)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    uid: str
    email: str | None
