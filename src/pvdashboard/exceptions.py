"""Exceptions for the persistent volume dashboard."""

from __future__ import annotations

from typing import Self, override

from jinja2 import TemplateError
from kubernetes_asyncio.client import ApiException
from safir.slack.blockkit import (
    SlackCodeBlock,
    SlackException,
    SlackMessage,
    SlackTextBlock,
    SlackTextField,
)

__all__ = [
    "KubernetesError",
    "TemplateLoadError",
]


class KubernetesError(SlackException):
    """An API call to Kubernetes failed.

    Parameters
    ----------
    message
        Summary of error.
    kind
        Kind of object being acted on.
    namespace
        Namespace of object being acted on.
    name
        Name of object being acted on.
    status
        Status code of failure, if any.
    body
        Body of failure message, if any.
    """

    @classmethod
    def from_exception(
        cls,
        message: str,
        exc: ApiException,
        *,
        kind: str | None = None,
        namespace: str | None = None,
        name: str | None = None,
    ) -> Self:
        """Create an exception from a Kubernetes API exception.

        Parameters
        ----------
        message
            Brief explanation of what was being attempted.
        exc
            Kubernetes API exception.
        kind
            Kind of object being acted on.
        namespace
            Namespace of object being acted on.
        name
            Name of object being acted on.

        Returns
        -------
        KubernetesError
            Newly-created exception.
        """
        return cls(
            message,
            kind=kind,
            namespace=namespace,
            name=name,
            status=exc.status,
            body=exc.body if exc.body else exc.reason,
        )

    def __init__(
        self,
        message: str,
        *,
        kind: str | None = None,
        namespace: str | None = None,
        name: str | None = None,
        status: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.namespace = namespace
        self.name = name
        self.status = status
        self.body = body

    @override
    def __str__(self) -> str:
        result = self._summary()
        if self.body:
            result += f": {self.body}"
        return result

    @override
    def to_slack(self) -> SlackMessage:
        """Convert to a Slack message for Slack alerting.

        Returns
        -------
        safir.slack.blockkit.SlackMessage
            Slack message suitable for posting as an alert.
        """
        message = super().to_slack()
        message.message = self._summary()
        if self.status:
            field = SlackTextField(heading="Status", text=str(self.status))
            message.fields.append(field)
        if self.kind:
            obj = self._object()
            message.blocks.append(SlackTextBlock(heading="Object", text=obj))
        if self.body:
            code = SlackCodeBlock(heading="Error", code=self.body)
            message.blocks.append(code)
        return message

    def _object(self) -> str:
        """Describe the object being acted on."""
        kind = self.kind or "object"
        if self.name and self.namespace:
            return f"{kind} {self.namespace}/{self.name}"
        elif self.name:
            return f"{kind} {self.name}"
        elif self.namespace:
            return f"{kind} in namespace {self.namespace}"
        else:
            return kind

    def _summary(self) -> str:
        """Summarize the exception.

        Produces a single-line summary, used for the main part of the Slack
        message and part of the stringification.
        """
        result = self.message
        details = []
        if self.kind:
            details.append(self._object())
        if self.status:
            details.append(f"status {self.status}")
        if details:
            result += " (" + ", ".join(details) + ")"
        return result


class TemplateLoadError(Exception):
    """The dashboard template could not be loaded or parsed.

    Parameters
    ----------
    template
        Name or path of the template.
    exc
        Underlying Jinja exception.
    """

    def __init__(self, template: str, exc: TemplateError) -> None:
        msg = f"Cannot load template {template}: {type(exc).__name__}: {exc!s}"
        super().__init__(msg)
        self.template = template
