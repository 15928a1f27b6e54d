"""FastAPI dependencies; override these in tests."""
from stylist.agent.registry import AgentRegistry, agent_registry
from stylist.database.repository import SqlStoreRepository, StoreRepository

_repository = SqlStoreRepository()


def get_repository() -> StoreRepository:
    return _repository


def get_registry() -> AgentRegistry:
    return agent_registry
