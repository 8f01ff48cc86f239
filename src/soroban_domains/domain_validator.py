"""
Domain validation module.

Checks that a domain string follows the rules the registry contract enforces:
lowercase ASCII letters only, two or three dot separated labels, final label
at least two characters, no label longer than fifteen characters.
It does not check that the top level domain exists.
"""

import re
from dataclasses import dataclass
from typing import Optional

from .enums import DomainValidationErrorCode


DOMAIN_PATTERN = re.compile(r"^[a-z]+(\.[a-z]+)*\.[a-z]{2,}$")

MAX_LABELS = 3
MAX_LABEL_LENGTH = 15


def is_valid_domain(domain: str) -> bool:
    """
    Validate a domain string, for example 'stellar.xlm'.

    Args:
        domain: The domain to validate (must already be lowercase)

    Returns:
        True if the registry would accept the domain
    """
    if not DOMAIN_PATTERN.fullmatch(domain):
        return False
    parts = domain.split(".")
    if len(parts) > MAX_LABELS:
        return False
    return all(len(part) <= MAX_LABEL_LENGTH for part in parts)


@dataclass
class DomainValidationError:
    """Structured error information for domain validation failures."""

    code: DomainValidationErrorCode
    message: str
    details: dict


@dataclass
class DomainValidationResult:
    """Result of domain validation operation."""

    valid: bool
    canonical_domain: Optional[str]
    error: Optional[DomainValidationError]


class DomainValidator:
    """
    Normalizes user input and explains why a domain is rejected.

    is_valid_domain() answers yes/no on exact input; the validator first
    strips and lowercases the input and reports the failing rule.
    """

    def normalize(self, raw_domain: str) -> str:
        """Strip surrounding whitespace and lowercase."""
        return raw_domain.strip().lower()

    def validate(self, raw_domain: str) -> DomainValidationResult:
        """
        Validate and normalize a domain string.

        Args:
            raw_domain: The raw domain string to validate

        Returns:
            DomainValidationResult with the canonical form or the error
        """
        if not raw_domain or not raw_domain.strip():
            return self._failure(
                DomainValidationErrorCode.EMPTY_INPUT,
                "Domain input is empty",
                {"raw_input": raw_domain},
            )

        domain = self.normalize(raw_domain)

        if not DOMAIN_PATTERN.fullmatch(domain):
            return self._failure(
                DomainValidationErrorCode.FORBIDDEN_CHARS,
                "Domain must be lowercase letters separated by dots",
                {"raw_input": raw_domain, "canonical": domain},
            )

        parts = domain.split(".")
        if len(parts) > MAX_LABELS:
            return self._failure(
                DomainValidationErrorCode.TOO_MANY_LABELS,
                f"Domain has {len(parts)} labels, at most {MAX_LABELS} are allowed",
                {"raw_input": raw_domain, "labels": parts},
            )

        long_labels = [part for part in parts if len(part) > MAX_LABEL_LENGTH]
        if long_labels:
            return self._failure(
                DomainValidationErrorCode.LABEL_TOO_LONG,
                f"Labels may be at most {MAX_LABEL_LENGTH} characters long",
                {"raw_input": raw_domain, "labels": long_labels},
            )

        return DomainValidationResult(valid=True, canonical_domain=domain, error=None)

    def _failure(
        self,
        code: DomainValidationErrorCode,
        message: str,
        details: dict,
    ) -> DomainValidationResult:
        return DomainValidationResult(
            valid=False,
            canonical_domain=None,
            error=DomainValidationError(code=code, message=message, details=details),
        )
