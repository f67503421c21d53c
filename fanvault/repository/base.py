# fanvault/repository/base.py
from enum import Enum
from typing import List, Optional, Any, TypeVar, Generic, Dict

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

ModelType = TypeVar("ModelType")
CreateSchemaType = TypeVar("CreateSchemaType")
UpdateSchemaType = TypeVar("UpdateSchemaType")


def plain_values(data: Dict[str, Any]) -> Dict[str, Any]:
    """Enum значения схем превращаются в строки для String колонок"""
    return {key: value.value if isinstance(value, Enum) else value for key, value in data.items()}


class BaseRepository(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, model):
        self.model = model

    async def get(self, db: AsyncSession, id: int) -> Optional[ModelType]:
        stmt = select(self.model).where(self.model.id == id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def create(
            self,
            db: AsyncSession,
            obj_in: CreateSchemaType,
            **extra_data
    ) -> ModelType:
        create_data = plain_values(obj_in.model_dump())
        create_data.update(extra_data)
        return await self.create_from_dict(db, create_data)

    async def create_from_dict(self, db: AsyncSession, data: Dict[str, Any]) -> ModelType:
        db_obj = self.model(**data)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def update(
            self,
            db: AsyncSession,
            db_obj: ModelType,
            obj_in: UpdateSchemaType
    ) -> ModelType:
        update_data = plain_values(obj_in.model_dump(exclude_unset=True))
        return await self.update_fields(db, db_obj, **update_data)

    async def update_fields(self, db: AsyncSession, db_obj: ModelType, **fields) -> ModelType:
        """Обновление отдельных полей объекта"""
        for field, value in fields.items():
            setattr(db_obj, field, value)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def delete(self, db: AsyncSession, id: int) -> bool:
        obj = await self.get(db, id)
        if obj:
            await db.delete(obj)
            await db.commit()
            return True
        return False

    async def get_by_field(
            self,
            db: AsyncSession,
            field_name: str,
            field_value: Any,
            order_by: Optional[Any] = None,
            skip: int = 0,
            limit: int = 100,
            **additional_filters
    ) -> List[ModelType]:
        """Универсальный метод для получения по полю с фильтрацией и сортировкой"""
        stmt = select(self.model).where(getattr(self.model, field_name) == field_value)

        # Дополнительные фильтры
        for filter_field, filter_value in additional_filters.items():
            if filter_value is not None:
                stmt = stmt.where(getattr(self.model, filter_field) == filter_value)

        if order_by is not None:
            stmt = stmt.order_by(order_by)

        stmt = stmt.offset(skip).limit(limit)
        result = await db.execute(stmt)
        return result.scalars().all()

    async def count(self, db: AsyncSession, **filters) -> int:
        """Подсчет строк с фильтрами по равенству"""
        stmt = select(func.count(self.model.id))
        for field, value in filters.items():
            if value is not None:
                stmt = stmt.where(getattr(self.model, field) == value)
        result = await db.execute(stmt)
        return result.scalar() or 0

    async def increment_field(
            self,
            db: AsyncSession,
            id: int,
            field_name: str,
            increment: int = 1
    ) -> None:
        """Увеличение числового поля"""
        stmt = (
            update(self.model)
            .where(self.model.id == id)
            .values({field_name: getattr(self.model, field_name) + increment})
        )
        await db.execute(stmt)
        await db.commit()
