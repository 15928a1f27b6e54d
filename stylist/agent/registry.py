"""Live conversations keyed by channel and session."""
from collections import OrderedDict
from typing import Dict, Optional, Tuple, Union

from stylist.agent.web_chat import WebChatAgent
from stylist.agent.whatsapp_chat import WhatsAppAgent
from stylist.analytics.logger import logger
from stylist.database.repository import StoreRepository
from stylist.memory.session_manager import SessionManager
from stylist.utils.clock import Clock, system_clock
from stylist.utils.config import settings

Agent = Union[WebChatAgent, WhatsAppAgent]
Key = Tuple[str, str]


class AgentRegistry:
    """One agent per (channel, session); channels never share state.

    Agents are kept in least-recently-used order. An agent idle for longer
    than ``idle_seconds`` is evicted, and the oldest ones go first once
    ``max_agents`` is exceeded. Agents in the middle of a turn are never
    evicted.
    """

    def __init__(
        self,
        clock: Clock = system_clock,
        idle_seconds: Optional[float] = None,
        max_agents: Optional[int] = None,
    ):
        self.clock = clock
        self.idle_seconds = settings.conversation_idle_seconds if idle_seconds is None else idle_seconds
        self.max_agents = settings.max_conversations if max_agents is None else max_agents
        self.agents: "OrderedDict[Key, Agent]" = OrderedDict()
        self.last_seen: Dict[Key, float] = {}

    def _touch(self, key: Key) -> None:
        self.agents.move_to_end(key)
        self.last_seen[key] = self.clock.now()

    def get(self, channel: str, session_id: str) -> Optional[Agent]:
        self.evict_idle()
        key = (channel, session_id)
        agent = self.agents.get(key)
        if agent is not None:
            self._touch(key)
        return agent

    def _current(self, channel: str, session_id: str, user_id: Optional[str]) -> Optional[Agent]:
        agent = self.get(channel, session_id)
        if agent is None:
            return None
        current_user = agent.context.shopper.id if agent.context.shopper else None
        if user_id and current_user and user_id != current_user:
            logger.info(f"Shopper changed on {channel}:{session_id}, starting a new conversation")
            self.discard(channel, session_id)
            return None
        return agent

    def _register(self, agent: Agent, session_id: str) -> None:
        key = (agent.channel, session_id)
        self.agents[key] = agent
        self._touch(key)
        self._evict_overflow()

    async def web_agent(
        self, repository: StoreRepository, session_id: str, user_id: Optional[str] = None
    ) -> WebChatAgent:
        agent = self._current(WebChatAgent.channel, session_id, user_id)
        if agent is None:
            context = await SessionManager(repository).build_context(session_id, user_id)
            agent = WebChatAgent(context, repository, clock=self.clock)
            self._register(agent, session_id)
        return agent

    async def whatsapp_agent(
        self, repository: StoreRepository, session_id: str, user_id: Optional[str] = None
    ) -> WhatsAppAgent:
        agent = self._current(WhatsAppAgent.channel, session_id, user_id)
        if agent is None:
            context = await SessionManager(repository).build_context(session_id, user_id)
            agent = WhatsAppAgent(context, repository, clock=self.clock)
            self._register(agent, session_id)
        return agent

    @staticmethod
    def _busy(agent: Agent) -> bool:
        return agent.turn_lock.locked()

    def evict_idle(self) -> int:
        """Drop conversations with no turn inside the idle window."""
        cutoff = self.clock.now() - self.idle_seconds
        stale = [
            key for key, agent in self.agents.items()
            if self.last_seen.get(key, 0.0) <= cutoff and not self._busy(agent)
        ]
        for key in stale:
            logger.info(f"Evicting idle conversation {key[0]}:{key[1]}")
            self.discard(*key)
        return len(stale)

    def _evict_overflow(self) -> None:
        for key in list(self.agents):
            if len(self.agents) <= self.max_agents:
                break
            if self._busy(self.agents[key]):
                continue
            logger.info(f"Evicting conversation {key[0]}:{key[1]} over the {self.max_agents} limit")
            self.discard(*key)

    def discard(self, channel: str, session_id: str) -> None:
        self.last_seen.pop((channel, session_id), None)
        agent = self.agents.pop((channel, session_id), None)
        if isinstance(agent, WhatsAppAgent):
            agent.close()

    def close(self) -> None:
        for key in list(self.agents):
            self.discard(*key)


# Global registry
agent_registry = AgentRegistry()
