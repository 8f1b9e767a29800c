from fastapi import APIRouter, Depends, Response

from prdforge.api.deps import get_template_service
from prdforge.schemas.artifacts import CreateTemplateRequest, TemplateResponse
from prdforge.services.template_service import TemplateService

router = APIRouter()


@router.get("", response_model=list[TemplateResponse])
async def list_templates(service: TemplateService = Depends(get_template_service)):
    return [TemplateResponse.from_model(template) for template in await service.list_templates()]


@router.get("/{template_id}", response_model=TemplateResponse)
async def get_template(template_id: int, service: TemplateService = Depends(get_template_service)):
    return TemplateResponse.from_model(await service.get_template(template_id))


@router.post("", response_model=TemplateResponse, status_code=201)
async def create_template(request: CreateTemplateRequest, service: TemplateService = Depends(get_template_service)):
    template = await service.create_template(
        name=request.name,
        idea=request.idea,
        description=request.description,
        category=request.category,
    )
    return TemplateResponse.from_model(template)


@router.delete("/{template_id}", status_code=204)
async def delete_template(template_id: int, service: TemplateService = Depends(get_template_service)):
    await service.delete_template(template_id)
    return Response(status_code=204)
