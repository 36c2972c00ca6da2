"""
Reference API Routes: read-only access to the bundled market snapshot.
Endpoints:
  GET /api/reference/countries
  GET /api/reference/countries/{country_id}
  GET /api/reference/industries
  GET /api/reference/cities
"""
from dataclasses import asdict

from fastapi import APIRouter, HTTPException, Request

router = APIRouter()


def _reference(request: Request):
    return request.app.state.reference


@router.get("/countries")
def list_countries(request: Request):
    reference = _reference(request)
    return {"version": reference.version, "countries": [asdict(m) for m in reference.markets()]}


@router.get("/countries/{country_id}")
def get_country(country_id: str, request: Request):
    reference = _reference(request)
    record = reference.lookup(country_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Unknown country '{country_id}'")
    digital = reference.digital_metrics(country_id)
    return {
        **asdict(record),
        "digital_metrics": asdict(digital) if digital else None,
        "cities": [asdict(c) for c in reference.cities() if c.country == record.id],
    }


@router.get("/industries")
def list_industries(request: Request):
    reference = _reference(request)
    return {"version": reference.version, "industries": [asdict(i) for i in reference.industries()]}


@router.get("/cities")
def list_cities(request: Request):
    reference = _reference(request)
    return {"version": reference.version, "cities": [asdict(c) for c in reference.cities()]}
