"""Request and response models for the AI optimization service."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OptimizeImageInput(BaseModel):
    """A photo to optimize, as a base64 data URI."""

    model_config = ConfigDict(populate_by_name=True)

    photo_data_uri: str = Field(alias="photoDataUri")

    @field_validator("photo_data_uri")
    @classmethod
    def _must_be_data_uri(cls, value: str) -> str:
        if not value.startswith("data:") or ";base64," not in value:
            raise ValueError(
                "Expected a data URI with a MIME type and base64 encoding: "
                "'data:<mimetype>;base64,<encoded_data>'"
            )
        return value


class OptimizeImageOutput(BaseModel):
    """The optimized photo and details about what changed."""

    model_config = ConfigDict(populate_by_name=True)

    optimized_photo_data_uri: str = Field(alias="optimizedPhotoDataUri")
    optimization_details: str = Field(alias="optimizationDetails")
