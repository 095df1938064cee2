"""Root-domain trust policy for redirects and manifest-declared URLs.

A plugin is identified by the domain its manifest is served from. Anything
the plugin points us at afterwards -- the redirect target of the manifest
request, the OpenAPI document, the legal-info page, the contact e-mail --
must stay within that domain. Two relations are checked:

* :meth:`RedirectValidator.validate_redirect` -- may a request for
  *original* end up at *target*? A ``www`` host may fall back to its root
  domain and any host may descend into a deeper subdomain of itself, but
  climbing to a parent, hopping to a sibling subdomain, or moving to another
  domain is refused.
* :meth:`RedirectValidator.is_same_second_domain` -- do two hosts share
  their second-level label (``example`` in ``www.example.com``)?

Host labels are compared as sets, not as ordered suffixes, so
``a.b.example.com`` and ``example.b.a.com`` count as the same labels.

Both checks are pure; the class only exists so collaborators can be handed
a substitute in tests.
"""

from __future__ import annotations

from urllib.parse import urlsplit

from aiplugin.exceptions import DomainPolicyError


def _hostname(value: str) -> str:
    """Return the lower-cased host of a URL or of a bare host name."""
    host = urlsplit(value).hostname
    if host is None:
        # Bare host such as the domain part of an e-mail address.
        host = urlsplit(f"//{value.strip()}").hostname
    return host or ""


def _labels(host: str) -> list[str]:
    return host.split(".")


def _contains_all(labels: list[str], others: list[str]) -> bool:
    return all(label in others for label in labels)


class RedirectValidator:
    """Enforces the plugin root-domain policy over pairs of URLs."""

    def validate_redirect(self, original_url: str, target_url: str) -> None:
        """Check that a request for *original_url* may end up at *target_url*.

        Args:
            original_url: The URL that was requested or that declares trust.
            target_url: The URL actually reached, or declared by the plugin.

        Raises:
            DomainPolicyError: If *target_url* leaves the original's domain.
        """
        original_host = _hostname(original_url)
        target_host = _hostname(target_url)
        original = _labels(original_host)
        target = _labels(target_host)
        is_www = original_host.startswith("www")

        if len(original) > len(target) and not is_www:
            raise DomainPolicyError(
                f"Redirect to parent level domain is disallowed: "
                f"{original_host} -> {target_host}"
            )

        if len(original) == len(target) and not _contains_all(original, target):
            if not is_www:
                raise DomainPolicyError(
                    f"Redirect to same level subdomain is disallowed: "
                    f"{original_host} -> {target_host}"
                )
            raise DomainPolicyError(
                f"Redirect to another domain is disallowed: "
                f"{original_host} -> {target_host}"
            )

        if len(original) < len(target) and not _contains_all(original, target):
            raise DomainPolicyError(
                f"Redirect to an unrelated subdomain is disallowed: "
                f"{original_host} -> {target_host}"
            )

    def is_same_second_domain(self, first: str, second: str) -> bool:
        """Return whether two URLs (or bare hosts) share a second-level domain.

        Single-label hosts such as ``localhost`` only match themselves.

        Example::

            >>> RedirectValidator().is_same_second_domain(
            ...     "https://example.com", "https://example.org")
            True
        """
        first_labels = _labels(_hostname(first))
        second_labels = _labels(_hostname(second))
        if len(first_labels) < 2 or len(second_labels) < 2:
            return first_labels == second_labels
        return first_labels[-2] == second_labels[-2]


_default_validator = RedirectValidator()


def validate_redirect(original_url: str, target_url: str) -> None:
    """Module-level shortcut for :meth:`RedirectValidator.validate_redirect`."""
    _default_validator.validate_redirect(original_url, target_url)


def is_same_second_domain(first: str, second: str) -> bool:
    """Module-level shortcut for :meth:`RedirectValidator.is_same_second_domain`."""
    return _default_validator.is_same_second_domain(first, second)
