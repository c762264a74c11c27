from fastapi import APIRouter, Depends, HTTPException, Request

from miniassoc.registry import Registry
from miniassoc.schemas import AssociationOut, EntityOut

router = APIRouter()


def get_registry(request: Request) -> Registry:
    return request.app.state.registry


def _entity_or_404(registry, name):
    entity = registry.get(name)
    if entity is None:
        raise HTTPException(status_code=404, detail=f"Entity {name} not found")
    return entity


@router.get("/api/entities", response_model=list[EntityOut])
def list_entities(registry: Registry = Depends(get_registry)):
    return [EntityOut.from_entity(entity) for entity in registry]


@router.get("/api/entities/{name}", response_model=EntityOut)
def get_entity(name: str, registry: Registry = Depends(get_registry)):
    return EntityOut.from_entity(_entity_or_404(registry, name))


@router.get("/api/entities/{name}/associations", response_model=list[AssociationOut])
def get_entity_associations(name: str, registry: Registry = Depends(get_registry)):
    entity = _entity_or_404(registry, name)
    return [AssociationOut.from_association(a) for a in registry.associations_for(entity)]


@router.get("/api/associations", response_model=list[AssociationOut])
def list_associations(kind: str | None = None, registry: Registry = Depends(get_registry)):
    associations = registry.associations
    if kind:
        associations = [a for a in associations if a.kind.value == kind]
    return [AssociationOut.from_association(a) for a in associations]
