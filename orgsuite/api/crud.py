"""
Tenant-scoped CRUD router factory.

Most feature records are flat documents owned by one organization. For each
of them this module builds the five standard routes:

    POST   {prefix}            create (organization stamped from the caller)
    GET    {prefix}            list, with equality filters and paging
    GET    {prefix}/{id}       read
    PUT    {prefix}/{id}       partial update of the fields sent
    DELETE {prefix}/{id}       delete

Every query is restricted to the caller's organization and every mutation
is written to the activity log. Feature routers add their own routes to the
returned router.
"""

import datetime as dt
from typing import Any, Awaitable, Callable, Optional, Sequence
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel
from sqlalchemy import JSON, Boolean, Date, Float, Integer, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.types import Uuid

from orgsuite.database import get_db
from orgsuite.exceptions import BusinessRuleError, ConflictError
from orgsuite.middleware.auth import TenantContext, require_module
from orgsuite.permissions import Module
from orgsuite.services.activity import log_activity

# before_create(db, ctx, data) and before_update(db, ctx, record, data) may
# validate, denormalise and return the values to store
CreateHook = Callable[[AsyncSession, TenantContext, dict], Awaitable[dict]]
UpdateHook = Callable[[AsyncSession, TenantContext, Any, dict], Awaitable[dict]]
DeleteHook = Callable[[AsyncSession, TenantContext, Any], Awaitable[None]]
ListHook = Callable[[AsyncSession, TenantContext], Awaitable[None]]


class TenantRecordResponse(BaseModel):
    """Fields every tenant record response carries."""

    id: UUID
    organization_id: UUID
    created_at: dt.datetime
    updated_at: dt.datetime

    class Config:
        from_attributes = True


def column_values(model, payload: BaseModel, exclude_unset: bool = False) -> dict:
    """
    Column values of a payload.

    JSON columns get JSON-ready values (UUIDs and dates as strings); other
    columns keep native Python types.
    """
    native = payload.model_dump(exclude_unset=exclude_unset)
    jsonable = payload.model_dump(mode="json", exclude_unset=exclude_unset)
    columns = model.__table__.columns
    return {
        key: jsonable[key] if key in columns and isinstance(columns[key].type, JSON) else value
        for key, value in native.items()
    }


def reject_nulls(model, data: dict) -> dict:
    """
    Refuse explicit nulls sent for columns that must always hold a value.

    Raises:
        BusinessRuleError: If a NOT NULL column is set to None
    """
    columns = model.__table__.columns
    empty = sorted(
        key for key, value in data.items()
        if value is None and key in columns and not columns[key].nullable
    )
    if empty:
        raise BusinessRuleError(f"Fields cannot be null: {', '.join(empty)}")
    return data


def _coerce_filter(column, raw: str):
    """Convert a query string value to the column's type."""
    column_type = column.type
    try:
        if isinstance(column_type, Uuid):
            return UUID(raw)
        if isinstance(column_type, Boolean):
            if raw.lower() not in ("true", "false", "1", "0"):
                raise ValueError(raw)
            return raw.lower() in ("true", "1")
        if isinstance(column_type, Date):
            return dt.date.fromisoformat(raw)
        if isinstance(column_type, Integer):
            return int(raw)
        if isinstance(column_type, Float):
            return float(raw)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid value for filter '{column.name}': {raw}",
        )
    return raw


async def get_tenant_record(db: AsyncSession, ctx: TenantContext, model, record_id: UUID, label: str):
    """
    Fetch a record by id for the caller.

    Raises:
        HTTPException: 404 if missing, 403 if it belongs to another organization
    """
    result = await db.execute(select(model).where(model.id == record_id))
    record = result.scalar_one_or_none()
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} {record_id} not found"
        )
    ctx.check(record)
    return record


async def ensure_unique(
    db: AsyncSession,
    model,
    organization_id: UUID,
    fields: Sequence[str],
    data: dict,
    label: str,
    exclude_id: Optional[UUID] = None,
) -> None:
    """
    Refuse a value already used by another record of the organization.

    Raises:
        ConflictError: If a unique field value is taken
    """
    for field in fields:
        if data.get(field) is None:
            continue
        query = select(model.id).where(
            model.organization_id == organization_id, getattr(model, field) == data[field]
        )
        if exclude_id is not None:
            query = query.where(model.id != exclude_id)
        if (await db.execute(query)).first() is not None:
            raise ConflictError(f"{label} with {field} '{data[field]}' already exists")


def build_crud_router(
    *,
    model,
    module: Module,
    resource: str,
    label: str,
    prefix: str,
    tags: list[str],
    create_schema: type[BaseModel],
    update_schema: type[BaseModel],
    response_schema: type[BaseModel],
    order_by: Optional[Sequence] = None,
    unique_fields: Sequence[str] = (),
    filter_fields: Sequence[str] = (),
    before_create: Optional[CreateHook] = None,
    before_update: Optional[UpdateHook] = None,
    before_delete: Optional[DeleteHook] = None,
    before_list: Optional[ListHook] = None,
) -> APIRouter:
    """
    Build the standard tenant CRUD router for ``model``.

    Args:
        model: SQLAlchemy tenant model
        module: Feature module guarding every route
        resource: Activity log resource name (usually the table name)
        label: Human name used in error messages ("Student")
        prefix: Route prefix
        tags: OpenAPI tags
        create_schema: Request body of POST
        update_schema: Request body of PUT (all fields optional)
        response_schema: Response model
        order_by: Columns for a stable list order (defaults to created_at)
        unique_fields: Fields unique within an organization (409 on clash)
        filter_fields: Columns accepted as equality filters on list
        before_create: Hook run before insert
        before_update: Hook run before applying an update
        before_delete: Hook run before delete
        before_list: Hook run before listing (e.g. lazy seeding)
    """
    router = APIRouter(prefix=prefix, tags=tags)
    guard = require_module(module)
    ordering = list(order_by) if order_by else [model.created_at]

    @router.post("", response_model=response_schema, status_code=status.HTTP_201_CREATED)
    async def create_record(
        payload: create_schema,
        db: AsyncSession = Depends(get_db),
        ctx: TenantContext = Depends(guard),
    ):
        organization_id = ctx.require_organization()
        data = column_values(model, payload)
        if before_create is not None:
            data = await before_create(db, ctx, data)
        await ensure_unique(db, model, organization_id, unique_fields, data, label)

        record = model(organization_id=organization_id, **data)
        db.add(record)
        await db.flush()
        log_activity(
            db, ctx.user, "CREATE", resource, record.id,
            changes=payload.model_dump(mode="json"), organization_id=organization_id,
        )
        await db.commit()
        await db.refresh(record)
        return record

    @router.get("", response_model=list[response_schema])
    async def list_records(
        request: Request,
        skip: int = Query(0, ge=0),
        limit: int = Query(100, ge=1, le=500),
        db: AsyncSession = Depends(get_db),
        ctx: TenantContext = Depends(guard),
    ):
        if before_list is not None:
            await before_list(db, ctx)
        query = ctx.scope(select(model), model)
        columns = model.__table__.columns
        for field in filter_fields:
            raw = request.query_params.get(field)
            if raw is not None:
                query = query.where(columns[field] == _coerce_filter(columns[field], raw))
        query = query.order_by(*ordering, model.id).offset(skip).limit(limit)
        result = await db.execute(query)
        return result.scalars().all()

    @router.get("/{record_id}", response_model=response_schema)
    async def get_record(
        record_id: UUID,
        db: AsyncSession = Depends(get_db),
        ctx: TenantContext = Depends(guard),
    ):
        return await get_tenant_record(db, ctx, model, record_id, label)

    @router.put("/{record_id}", response_model=response_schema)
    async def update_record(
        record_id: UUID,
        payload: update_schema,
        db: AsyncSession = Depends(get_db),
        ctx: TenantContext = Depends(guard),
    ):
        record = await get_tenant_record(db, ctx, model, record_id, label)
        data = reject_nulls(model, column_values(model, payload, exclude_unset=True))
        if before_update is not None:
            data = await before_update(db, ctx, record, data)
        await ensure_unique(
            db, model, record.organization_id, unique_fields, data, label, exclude_id=record.id
        )

        for field, value in data.items():
            setattr(record, field, value)

        log_activity(
            db, ctx.user, "UPDATE", resource, record.id,
            changes=payload.model_dump(mode="json", exclude_unset=True),
            organization_id=record.organization_id,
        )
        await db.commit()
        await db.refresh(record)
        return record

    @router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_record(
        record_id: UUID,
        db: AsyncSession = Depends(get_db),
        ctx: TenantContext = Depends(guard),
    ):
        record = await get_tenant_record(db, ctx, model, record_id, label)
        if before_delete is not None:
            await before_delete(db, ctx, record)
        log_activity(
            db, ctx.user, "DELETE", resource, record.id, organization_id=record.organization_id
        )
        await db.delete(record)
        await db.commit()
        return None

    return router
