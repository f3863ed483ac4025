"""Models for the learning-platform notification simulation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Course(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)


class Professor(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    mastodon_handle: str = Field(
        ...,
        min_length=1,
        description="Local username on the Mastodon instance (no @domain).",
    )


class Video(BaseModel):
    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = ""
    duration: str = ""
    url: str
    thumbnail: str


class VideoUpload(BaseModel):
    """What the learning platform knows about an uploaded video."""

    video: Video
    course: Course
    professor: Professor
    enrolled_students: list[str] = Field(default_factory=list)


class WebhookPayload(BaseModel):
    event: str = "video.uploaded"
    timestamp: str
    course: Course
    professor: Professor
    video: Video
    enrolled_students: list[str] = Field(default_factory=list, serialization_alias="enrolledStudents")


class DeliveryRequest(BaseModel):
    """Description of the inbox POST a real server would perform. Never sent."""

    method: str = "POST"
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    body: dict[str, Any] = Field(default_factory=dict)


class Student(BaseModel):
    name: str
    handle: str


class Reaction(BaseModel):
    student: Student
    activity_type: str = Field(..., description="Like, Announce or Create (reply).")
    reply_text: str | None = None
