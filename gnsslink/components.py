"""Pluggable components that add device-specific behaviour to a receiver node."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar


class ComponentInterface(ABC):
    """A unit of functionality for a firmware version or product category.

    A node calls these methods in turn for every component it holds: read
    parameters, configure the receiver, set up diagnostics, then subscribe to
    the receiver's messages.
    """

    @abstractmethod
    def get_params(self) -> None:
        """Read and validate the component's parameters.

        Implementations raise InvalidSettingsError (or another ValueError)
        when a parameter is invalid or a required one is missing.
        """

    @abstractmethod
    def configure(self, gps: Any) -> bool:
        """Apply the component's settings to the receiver; return True on success."""

    @abstractmethod
    def initialize_diagnostics(self) -> None:
        """Register the component's diagnostics; may do nothing."""

    @abstractmethod
    def subscribe(self, gps: Any) -> None:
        """Subscribe to the receiver messages the component handles."""


class FtsProduct(ComponentInterface):
    """Component for FTS (frequency and time synchronisation) products.

    These devices have no specific parameters, diagnostics or subscriptions,
    and their configuration is unsupported, so configuring always reports
    failure.
    """

    supported: ClassVar[bool] = False

    def __init__(self) -> None:
        self.params: dict[str, Any] = {}
        self.diagnostics: list[Any] = []
        self.subscriptions: list[Any] = []
        self.configured = False

    def get_params(self) -> None:
        """Reset the parameters: FTS devices take no product-specific ones."""
        self.params = {}

    def configure(self, gps: Any) -> bool:
        """Record the (always unsuccessful) configuration attempt; returns False."""
        self.configured = self.supported
        return self.configured

    def initialize_diagnostics(self) -> None:
        """Reset the diagnostics: FTS devices register none."""
        self.diagnostics = []

    def subscribe(self, gps: Any) -> None:
        """Reset the subscriptions: FTS devices subscribe to no messages."""
        self.subscriptions = []