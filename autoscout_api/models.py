"""
Pydantic models for API request/response serialization.
"""
from typing import List
from pydantic import BaseModel

class VehicleOut(BaseModel):
    """Output model for one extracted vehicle."""
    url: str
    page: int
    title: str = ""
    brand: str = ""
    model: str = ""
    price: str = ""
    year: str = ""
    mileage: str = ""
    fuel_type: str = ""
    transmission: str = ""
    power: str = ""
    location: str = ""
    image_url: str = ""
    phone: str = ""
    seller: str = ""
    note: str = ""
    extracted_at: str = ""

class JobsResponse(BaseModel):
    """Ids of the crawl jobs currently running."""
    jobs: List[str]

class StopResponse(BaseModel):
    """Acknowledgement of a stop request."""
    success: bool
    message: str
    cancelled: int = 0
