import json
from typing import Optional, Any
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_serializer, field_validator


"""Pydantic schemas for registrations, geocoder results and marketing contacts. - schemas"""


class Registration(BaseModel):
    """A visitor's pre-registration. lat/lon are filled in server-side. - registration"""
    name: str = ""
    email: str = ""
    country: str = ""
    zip: str = ""
    linkedin: str = ""
    profession: str = ""
    talent: bool = False
    seeker: bool = False
    newsletter: bool = False
    lon: str = ""
    lat: str = ""
    avatar: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        # JSON null leaves the field at its default
        if value is None:
            return cls.model_fields[info.field_name].default
        return value

    def address(self) -> str:
        """Free-text address handed to the geocoder. - address"""
        return f"{self.country} {self.zip}"


# Identifying fields never returned by the marketing-backed listing
PRIVATE_FIELDS = {"name", "email", "country", "zip", "avatar"}

# Fields the database-backed listing selects from registration_raw
DATABASE_LISTING_FIELDS = ["profession", "talent", "seeker", "newsletter", "lon", "lat", "avatar"]


class PublicRegistration(BaseModel):
    """Sanitized listing entry: a registration without identifying fields. - public_registration"""
    linkedin: str = ""
    profession: str = ""
    talent: bool = False
    seeker: bool = False
    newsletter: bool = False
    lon: str = ""
    lat: str = ""

    @classmethod
    def from_registration(cls, registration: Registration) -> "PublicRegistration":
        return cls(**registration.model_dump(exclude=PRIVATE_FIELDS))


class GeocodeCandidate(BaseModel):
    """One Nominatim /search match. Only lat/lon are used downstream. - geocode_candidate"""
    model_config = ConfigDict(populate_by_name=True)

    lat: str
    lon: str
    # Metadata is not used, so it is not type-checked
    place_id: Any = None
    licence: Any = None
    osm_type: Any = None
    osm_id: Any = None
    boundingbox: Any = None
    display_name: Any = None
    class_: Any = Field(default=None, alias="class")
    type: Any = None
    importance: Any = None


class StoredRegistration(BaseModel):
    """Database row envelope; id and timestamps are assigned by the store. - stored_registration"""
    id: Optional[str] = None
    created_on: Optional[str] = None
    modified_on: Optional[str] = None
    disabled_on: Optional[Any] = None
    registration_raw: Registration


class MarketingAttributes(BaseModel):
    """Contact attribute bag.

    RAW_JSON holds the full registration. The marketing provider only stores
    scalar attributes, so it travels as a JSON string on the wire and is
    decoded back into a Registration here.
    - marketing_attributes
    """
    RAW_JSON: Optional[Registration] = None
    NEWSLETTER: bool = False

    @field_validator("RAW_JSON", mode="before")
    @classmethod
    def decode_raw_json(cls, value: Any) -> Any:
        if isinstance(value, str):
            if not value.strip():
                return None
            return json.loads(value)
        return value

    @field_serializer("RAW_JSON")
    def encode_raw_json(self, value: Optional[Registration]) -> Optional[str]:
        if value is None:
            return None
        return value.model_dump_json()


class MarketingContact(BaseModel):
    """A contact on the marketing list. - marketing_contact"""
    email: str = ""
    updateEnabled: bool = False
    attributes: MarketingAttributes = Field(default_factory=MarketingAttributes)

    @classmethod
    def from_registration(cls, registration: Registration) -> "MarketingContact":
        return cls(
            email=registration.email,
            updateEnabled=False,
            attributes=MarketingAttributes(RAW_JSON=registration, NEWSLETTER=registration.newsletter),
        )
