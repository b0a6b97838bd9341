"""
Exceções de Domínio do sistema de Chamados.

Este módulo define exceções específicas do domínio que permitem
comunicar erros de forma clara e tipada entre as camadas.

Hierarquia:
    DomainException (base)
    ├── ValidationError (validação de entrada)
    │   └── InvalidEnumValueError (token de status/prioridade desconhecido)
    ├── EntityNotFoundError (entidade não existe ou foi excluída)
    ├── PermissionDeniedError (política de acesso negou a operação)
    └── PersistenceError (falha no armazenamento)
"""

from typing import Dict, List, Optional


class DomainException(Exception):
    """
    Exceção base para todos os erros de domínio.

    Todas as exceções específicas do domínio devem herdar desta classe.
    Isso permite capturar qualquer erro de domínio de forma genérica.

    Example:
        try:
            service.execute(input_dto, usuario)
        except DomainException as e:
            logger.error(f"Erro de domínio: {e}")
    """

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Serializa exceção para dicionário (útil para APIs)."""
        return {
            "error": self.code,
            "message": self.message,
        }


class ValidationError(DomainException):
    """
    Erro de validação de dados de entrada.

    Pode carregar um único campo (``field``) ou um mapa de erros por
    campo (``errors``), usado quando vários campos são validados de
    uma vez.

    Example:
        raise ValidationError(
            "Dados inválidos",
            errors={"titulo": ["O título deve ter no mínimo 5 caracteres."]},
        )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        errors: Optional[Dict[str, List[str]]] = None,
    ):
        self.field = field
        self.errors: Dict[str, List[str]] = dict(errors or {})
        if field and field not in self.errors:
            self.errors[field] = [message]
        code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.errors:
            result["errors"] = self.errors
        return result


class InvalidEnumValueError(ValidationError):
    """
    Token de enum desconhecido (status ou prioridade).

    Lançada na borda de parsing, antes do valor chegar aos use cases.
    """

    def __init__(self, message: str, field: str, value: object = None):
        self.value = value
        super().__init__(message, field=field)
        self.code = "INVALID_ENUM_VALUE"


class EntityNotFoundError(DomainException):
    """
    Entidade não encontrada no repositório.

    Tickets excluídos (soft delete) também são tratados como
    não encontrados.
    """

    def __init__(self, message: str, entity_type: str = None, entity_id: str = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "ENTITY_NOT_FOUND")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity_type:
            result["entity_type"] = self.entity_type
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


class PermissionDeniedError(DomainException):
    """
    Operação negada pela política de acesso.

    Inclui a regra de que apenas administradores definem o
    responsável por um ticket.
    """

    def __init__(
        self,
        message: str = "Você não tem permissão para realizar esta ação.",
        action: str = None,
    ):
        self.action = action
        super().__init__(message, "PERMISSION_DENIED")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.action:
            result["action"] = self.action
        return result


class PersistenceError(DomainException):
    """Falha do armazenamento; a transação inteira é desfeita."""

    def __init__(self, message: str):
        super().__init__(message, "PERSISTENCE_ERROR")
