"""Template management.

Loads and renders the Jinja template for the dashboard page. The template is
either shipped with the package or read from a configured path on disk, and
may be reparsed on every request so that it can be edited without restarting
the dashboard.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import (
    BaseLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    Template,
    TemplateError,
)
from safir.datetime import format_datetime_for_logging

from .constants import DASHBOARD_TEMPLATE
from .exceptions import TemplateLoadError
from .models.domain.dashboard import Snapshot

__all__ = ["DashboardRenderer"]


def _format_labels(labels: dict[str, str]) -> str:
    """Format Kubernetes labels as a human-readable string.

    Parameters
    ----------
    labels
        Labels to format.

    Returns
    -------
    str
        Comma-separated ``key=value`` pairs, sorted by key.
    """
    return ", ".join(f"{k}={v}" for k, v in sorted(labels.items()))


class DashboardRenderer:
    """Render the dashboard page from a snapshot.

    Parameters
    ----------
    template_path
        Path to the template on disk, or `None` to use the template shipped
        with the package.
    reload
        If `True`, read and parse the template for every render. Otherwise,
        load it once in the constructor.

    Raises
    ------
    TemplateLoadError
        Raised if ``reload`` is `False` and the template cannot be loaded.
    """

    def __init__(self, template_path: Path | None, *, reload: bool) -> None:
        loader: BaseLoader
        if template_path:
            loader = FileSystemLoader(template_path.parent)
            self._name = template_path.name
        else:
            loader = PackageLoader("pvdashboard", package_path="templates")
            self._name = DASHBOARD_TEMPLATE

        # A cache size of zero makes Jinja reparse the template every time
        # it is requested.
        self._env = Environment(
            loader=loader, autoescape=True, cache_size=0 if reload else 400
        )
        self._env.filters["format_labels"] = _format_labels
        self._env.filters["format_datetime"] = format_datetime_for_logging

        self._template = None if reload else self.load()

    @property
    def reload(self) -> bool:
        """Whether the template is reloaded for every render."""
        return self._template is None

    def load(self) -> Template:
        """Load and parse the template.

        Returns
        -------
        jinja2.Template
            Parsed template. If the template is not being reloaded, this is
            the template loaded at construction.

        Raises
        ------
        TemplateLoadError
            Raised if the template does not exist or cannot be parsed.
        """
        if self._template:
            return self._template
        try:
            return self._env.get_template(self._name)
        except TemplateError as e:
            raise TemplateLoadError(self._name, e) from e

    def render(self, template: Template, snapshot: Snapshot) -> str:
        """Render the dashboard.

        Parameters
        ----------
        template
            Template returned by `load`.
        snapshot
            Data to render.

        Returns
        -------
        str
            Rendered HTML page.

        Raises
        ------
        Exception
            Raised if rendering the template fails. Besides
            `jinja2.TemplateError`, this may be any exception raised by an
            expression or filter in the template.
        """
        return template.render(
            snapshot=snapshot,
            volumes=snapshot.volumes,
            claims=snapshot.claims,
            volume_names=snapshot.volume_names(),
        )
