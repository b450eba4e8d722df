"""
identity_store/store/discriminators.py — Дискриминаторы вариантов.

Стабильный строковый токен для каждого доменного варианта:
    User  ⇄ "USER"
    Group ⇄ "GROUP"
"""

from __future__ import annotations

import logging

from identity_store.exceptions import ConfigurationError
from identity_store.models.identity import IdentityType

logger = logging.getLogger(__name__)


class DiscriminatorResolver:
    """Двунаправленное отображение тип варианта ⇄ токен."""

    def __init__(self) -> None:
        self._tokens: dict[type[IdentityType], str] = {}
        self._types: dict[str, type[IdentityType]] = {}

    def register(self, domain_type: type[IdentityType], token: str) -> None:
        existing = self._types.get(token)
        if existing is not None and existing is not domain_type:
            raise ConfigurationError(
                f"Discriminator {token!r} is already registered for {existing.__name__}",
                details={"discriminator": token, "type": domain_type.__name__},
            )
        self._tokens[domain_type] = token
        self._types[token] = domain_type
        logger.debug("Registered discriminator %s → %s", token, domain_type.__name__)

    def token_for(self, domain_type: type[IdentityType]) -> str:
        try:
            return self._tokens[domain_type]
        except KeyError:
            raise ConfigurationError(
                f"No discriminator registered for {domain_type.__name__}",
                details={"type": domain_type.__name__},
            ) from None

    def type_for(self, token: str) -> type[IdentityType]:
        try:
            return self._types[token]
        except KeyError:
            raise ConfigurationError(
                f"Unknown discriminator: {token!r}",
                details={"discriminator": token},
            ) from None

    def tokens_for(self, domain_type: type[IdentityType], include_subtypes: bool = True) -> list[str]:
        """Токены типа и (опционально) всех зарегистрированных подтипов."""
        tokens = [self.token_for(domain_type)]
        if include_subtypes:
            tokens.extend(
                token
                for registered, token in self._tokens.items()
                if registered is not domain_type and issubclass(registered, domain_type)
            )
        return tokens
