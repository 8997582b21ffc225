"""
HolidayEase Backend - Pydantic Models
Data model definitions
"""

import re
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator


def _as_str(value: Any) -> Any:
    """Remote ids arrive as numbers or strings; identity is always the string."""
    if value is None or isinstance(value, str):
        return value
    return str(value)


# ============================================================
# Enums
# ============================================================

class LocationKind(str, Enum):
    """Role a location plays in a search"""
    DEPARTURE = "departure"
    REGION = "region"


class LocationType(int, Enum):
    """Remote location type codes"""
    COUNTRY = 1
    CITY = 2


# ============================================================
# Session Models
# ============================================================

class Credential(BaseModel):
    """Agency sign-in credential, sent as {Agency, User, Password}"""
    agency: str = Field(alias="Agency")
    user: str = Field(alias="User")
    password: str = Field(alias="Password", repr=False)

    class Config:
        populate_by_name = True
        frozen = True

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


class Session(BaseModel):
    """Bearer token issued by a successful login"""
    token: str
    expires_on: datetime = Field(alias="expiresOn")
    user_info: Optional[dict] = Field(default=None, alias="userInfo")

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("expires_on", mode="before")
    @classmethod
    def _trim_fraction(cls, v):
        # .NET timestamps carry 7 fractional digits
        if isinstance(v, str):
            return re.sub(r"(\.\d{6})\d+", r"\1", v)
        return v

    @field_validator("expires_on")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def is_valid(self, now: datetime) -> bool:
        return now < self.expires_on


# ============================================================
# Location Models
# ============================================================

class Location(BaseModel):
    """A departure point or arrival region known to the booking API"""
    id: str
    name: str = ""
    type: int = LocationType.CITY.value
    kind: LocationKind
    code: Optional[str] = None
    parent_id: Optional[str] = Field(default=None, alias="parentId")
    country_id: Optional[str] = Field(default=None, alias="countryId")
    latitude: Optional[str] = None
    longitude: Optional[str] = None

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator(
        "id", "code", "parent_id", "country_id", "latitude", "longitude", mode="before"
    )
    @classmethod
    def _coerce_str(cls, v):
        return _as_str(v)

    @classmethod
    def from_remote(cls, raw: dict, kind: LocationKind) -> "Location":
        return cls(
            id=raw["id"],
            name=raw.get("name") or "",
            type=raw.get("type", LocationType.CITY.value),
            kind=kind,
            code=raw.get("code"),
            parentId=raw.get("parentId"),
            countryId=raw.get("countryId"),
            latitude=raw.get("latitude"),
            longitude=raw.get("longitude"),
        )

    def to_reference(self) -> dict:
        """Shape the booking API expects inside Departure/ArrivalLocations"""
        return {"Id": self.id, "Type": self.type}


class LocationCacheSnapshot(BaseModel):
    """Departures and arrivals fetched together, replaced wholesale"""
    departures: List[Location]
    arrivals: List[Location]
    fetched_at: datetime

    class Config:
        frozen = True


# ============================================================
# Search Models
# ============================================================

class RoomCriteria(BaseModel):
    """Occupancy of a single room"""
    adult: int = Field(alias="Adult", ge=1)
    child: Optional[int] = Field(default=None, alias="Child", ge=0)
    child_ages: List[int] = Field(default_factory=list, alias="ChildAges")

    class Config:
        populate_by_name = True

    @model_validator(mode="after")
    def _check_child_ages(self):
        if self.child is None:
            self.child = len(self.child_ages)
        elif self.child != len(self.child_ages):
            raise ValueError("ChildAges must contain one age per child")
        return self

    def to_payload(self) -> dict:
        # child count is implied by the ages list
        return {"Adult": self.adult, "ChildAges": list(self.child_ages)}


class SearchRequest(BaseModel):
    """Holiday package search submitted by the storefront"""
    departure_point: str = Field(alias="DeparturePoint")
    region: str = Field(validation_alias=AliasChoices("Region", "RegionList", "region"))
    check_in: date = Field(alias="CheckIn")
    duration: int = Field(alias="Duration", ge=1)
    rooms: List[RoomCriteria] = Field(alias="Rooms", min_length=1)
    nationality: str = Field(default="XK", alias="Nationality")
    currency: str = Field(default="EUR", alias="Currency")
    language: str = Field(default="EN", alias="Language")

    class Config:
        populate_by_name = True

    @field_validator("departure_point", mode="before")
    @classmethod
    def _departure_as_str(cls, v):
        return _as_str(v)

    @field_validator("region", mode="before")
    @classmethod
    def _first_region(cls, v):
        if isinstance(v, (list, tuple)):
            if not v:
                raise ValueError("RegionList must not be empty")
            v = v[0]
        return _as_str(v)

    @field_validator("check_in", mode="before")
    @classmethod
    def _date_part(cls, v):
        if isinstance(v, str):
            return v.split("T")[0]
        return v


class RoomSearchCriteria(BaseModel):
    """Criteria for a price search scoped to a single hotel"""
    check_in: Optional[str] = Field(default=None, alias="checkIn")
    duration: Optional[int] = Field(default=None, ge=1)
    region_list: List[str] = Field(default_factory=list, alias="regionList")
    rooms: Optional[List[RoomCriteria]] = None
    nationality: Optional[str] = None
    departure_point: Optional[str] = Field(default=None, alias="departurePoint")

    class Config:
        populate_by_name = True

    @field_validator("region_list", mode="before")
    @classmethod
    def _regions_as_str(cls, v):
        if v is None:
            return []
        return [_as_str(item) for item in v]

    @field_validator("departure_point", mode="before")
    @classmethod
    def _departure_as_str(cls, v):
        return _as_str(v)


# ============================================================
# Result Models
# ============================================================

class ServiceResult(BaseModel):
    """Uniform {success, data?, message?} result handed to the UI"""
    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: Any) -> "ServiceResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, message: str) -> "ServiceResult":
        return cls(success=False, message=message)


class HotelListResponse(BaseModel):
    """Storefront-compatible search response"""
    success: bool
    hotels: List[Any] = Field(default_factory=list)


class AuthStatus(BaseModel):
    """Current session state"""
    is_authenticated: bool = Field(alias="isAuthenticated")
    expires_on: Optional[datetime] = Field(default=None, alias="expiresOn")
    user_info: Optional[dict] = Field(default=None, alias="userInfo")

    class Config:
        populate_by_name = True
