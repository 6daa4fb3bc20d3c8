from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Optional

# --- Geography ---

class Coordinate(BaseModel):
    """A resolved latitude/longitude pair. Range checks happen in validate_masjid."""
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., description="Latitude in decimal degrees.")
    longitude: float = Field(..., description="Longitude in decimal degrees.")

class PrayerSchedule(BaseModel):
    """Daily prayer times keyed by canonical lowercase names (HH:MM, 24h)."""
    fajr: Optional[str] = None
    dhuhr: Optional[str] = None
    asr: Optional[str] = None
    maghrib: Optional[str] = None
    isha: Optional[str] = None

    def is_empty(self) -> bool:
        return not any(self.model_dump().values())

# --- Masjid documents ---

class MasjidCreate(BaseModel):
    """Request body for POST /api/masjid. Coordinates are optional when an address is given."""
    name: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[Any] = None
    longitude: Optional[Any] = None
    calculationMethod: Optional[str] = None
    description: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    services: List[str] = Field(default_factory=list)

class MasjidUpdate(BaseModel):
    """Request body for PUT /api/masjid/{id}. Only fields that are sent get updated."""
    name: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    calculationMethod: Optional[str] = None
    description: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    services: Optional[List[str]] = None
    prayerTimes: Optional[PrayerSchedule] = None

class Masjid(BaseModel):
    """Stored masjid document. `id` doubles as the URL slug."""
    id: str
    name: str
    address: str
    latitude: float
    longitude: float
    calculationMethod: Optional[str] = None
    description: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    services: List[str] = Field(default_factory=list)
    prayerTimes: PrayerSchedule = Field(default_factory=PrayerSchedule)

# --- Distance ranking ---

class LocatedEntity(BaseModel):
    """Coordinate stub sent by clients for batch distance ranking; fields are checked per item."""
    id: Optional[Any] = None
    latitude: Optional[Any] = None
    longitude: Optional[Any] = None

class DistanceRequest(BaseModel):
    userLatitude: Optional[Any] = None
    userLongitude: Optional[Any] = None
    masajid: Optional[Any] = None

class DistanceResult(BaseModel):
    id: Optional[Any] = None
    distance: Optional[float] = None
    error: Optional[str] = None

# --- Users & auth ---

class User(BaseModel):
    """Stored user document."""
    id: str
    name: Optional[str] = None
    email: str
    passwordHash: Optional[str] = None
    admin: List[str] = Field(default_factory=list)

class PublicUser(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    admin: List[str] = Field(default_factory=list)

class TokenUser(BaseModel):
    """Claims carried by an access token; threaded through handlers as the current user."""
    userId: str
    email: str
    admin: List[str] = Field(default_factory=list)

class SignupRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None

class AuthResponse(BaseModel):
    success: bool = True
    message: str
    user: PublicUser
    token: Optional[str] = None

# --- Error Response Model ---

class ErrorResponse(BaseModel):
    """Standardized error response model."""
    success: bool = False
    error: str = Field(..., description="A human-readable explanation.")
    details: Optional[List[str]] = Field(None, description="Per-field validation messages.")
    error_id: Optional[str] = Field(None, description="Identifier of a logged server error.")
