import abc
import logging
from typing import Generic, List, Optional, Set, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AbstractRepository(abc.ABC, Generic[T]):
    def __init__(self):
        self.seen = set()  # type: Set[T]

    def add(self, entity: T) -> T:
        self._add(entity)
        self.seen.add(entity)
        return entity

    def get(self, entity_id) -> Optional[T]:
        entity = self._get(entity_id)
        if entity:
            self.seen.add(entity)
        return entity

    def find_by(self, **filters) -> Optional[T]:
        entity = self._find_by(**filters)
        if entity:
            self.seen.add(entity)
        return entity

    def list(self) -> List[T]:
        entities = self._list()
        for entity in entities:
            self.seen.add(entity)
        return entities

    def count_by(self, **filters) -> int:
        return self._count_by(**filters)

    def delete(self, entity: T) -> None:
        self._delete(entity)
        self.seen.discard(entity)

    @abc.abstractmethod
    def _add(self, entity: T):
        raise NotImplementedError

    @abc.abstractmethod
    def _get(self, entity_id) -> Optional[T]:
        raise NotImplementedError

    @abc.abstractmethod
    def _find_by(self, **filters) -> Optional[T]:
        raise NotImplementedError

    @abc.abstractmethod
    def _list(self) -> List[T]:
        raise NotImplementedError

    @abc.abstractmethod
    def _count_by(self, **filters) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    def _delete(self, entity: T):
        raise NotImplementedError


class SqlAlchemyRepository(AbstractRepository[T]):
    def __init__(self, session, entity_cls: Type[T]):
        super().__init__()
        self.session = session
        self.entity_cls = entity_cls

    def _add(self, entity):
        self.session.add(entity)

    def _get(self, entity_id):
        return self.session.get(self.entity_cls, entity_id)

    def _find_by(self, **filters):
        return self.session.query(self.entity_cls).filter_by(**filters).first()

    def _list(self):
        return self.session.query(self.entity_cls).all()

    def _count_by(self, **filters):
        return self.session.query(self.entity_cls).filter_by(**filters).count()

    def _delete(self, entity):
        self.session.delete(entity)
