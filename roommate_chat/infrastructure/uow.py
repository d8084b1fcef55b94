# roommate_chat/infrastructure/uow.py

from typing import Any, Dict, Type


class UoWModel:
    def __init__(self, model: Any, uow: "UnitOfWork"):
        self.__dict__["_model"] = model
        self.__dict__["_uow"] = uow

    def __getattr__(self, key):
        return getattr(self._model, key)

    def __setattr__(self, key, value):
        setattr(self._model, key, value)
        # new models are inserted as a whole, no need to track them as dirty
        if id(self._model) not in self._uow.new:
            self._uow.register_dirty(self._model)


class UnitOfWork:
    def __init__(self) -> None:
        self.dirty: Dict[int, Any] = {}
        self.new: Dict[int, Any] = {}
        self.mappers: Dict[Type, Any] = {}

    def register_dirty(self, model: Any) -> None:
        if isinstance(model, UoWModel):
            model = model._model
        model_id = id(model)
        if model_id not in self.new:
            self.dirty[model_id] = model

    def register_new(self, model: Any) -> UoWModel:
        if isinstance(model, UoWModel):
            model = model._model
        model_id = id(model)
        self.new[model_id] = model
        return UoWModel(model, self)

    def rollback(self) -> None:
        """Forget pending work after a failed commit."""
        self.new.clear()
        self.dirty.clear()

    async def commit(self) -> None:
        for model in self.new.values():
            await self.mappers[type(model)].insert(model)
        for model in self.dirty.values():
            await self.mappers[type(model)].update(model)

        self.new.clear()
        self.dirty.clear()
