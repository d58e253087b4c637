from fastapi import APIRouter, status

from akashic.api.deps import ServicesDep
from akashic.schemas import ContactRequest, ContactResponse

router = APIRouter(tags=["contact"])


@router.post("/contact", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
async def submit_contact(data: ContactRequest, services: ServicesDep):
    return await services.contact.submit_contact(data.name, data.email, data.subject, data.message)
