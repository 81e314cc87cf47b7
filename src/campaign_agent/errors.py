"""Exception taxonomy for campaign-agent."""

from __future__ import annotations


class CampaignAgentError(Exception):
    """Base class for all campaign-agent errors."""


class ConfigurationError(CampaignAgentError):
    """A required credential or setting is missing."""


class RequestValidationError(CampaignAgentError):
    """An inbound turn is missing required fields or carries invalid ones."""


class GenerationError(CampaignAgentError):
    """The generative model failed to produce a usable answer."""


class MalformedOutputError(GenerationError):
    """Structured output parsed but does not have the expected shape."""


class PersistenceError(CampaignAgentError):
    """The durable message store rejected a read or write."""
