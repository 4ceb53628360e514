"""
Domain errors raised by the conversation core and agent adapters
"""


class PatchbayError(Exception):
    """Base class for all domain errors"""


class AdapterError(PatchbayError):
    """An agent invocation failed (transport, auth or malformed response)"""

    def __init__(self, message: str, agent_id: str = ""):
        super().__init__(message)
        self.message = message
        self.agent_id = agent_id


class DispatchContractError(PatchbayError):
    """The coordinator was handed targets the router should never produce"""


class UnknownTargetError(DispatchContractError):
    """A dispatch target id is absent from the agent registry"""

    def __init__(self, agent_id: str):
        super().__init__(f"Agent '{agent_id}' not registered")
        self.agent_id = agent_id


class NonDispatchableTargetError(DispatchContractError):
    """A manual agent was handed to the coordinator as a dispatch target"""

    def __init__(self, agent_id: str):
        super().__init__(f"Agent '{agent_id}' is manual and cannot be dispatched to")
        self.agent_id = agent_id
