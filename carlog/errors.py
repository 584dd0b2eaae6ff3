"""Error types surfaced to the user.

Every error carries a short, localized message meant to be shown as-is by
the CLI or the web app.
"""


class CarlogError(Exception):
    """Base class for recoverable, user-facing errors."""

    message = "Erro inesperado."

    def __init__(self, message=None):
        self.message = message or self.message
        super().__init__(self.message)


class DuplicateUsername(CarlogError):
    message = "Este usuário já existe."


class InvalidCredentials(CarlogError):
    message = "Usuário ou senha inválidos."


class WrongCurrentPassword(CarlogError):
    message = "Senha atual incorreta."


class PasswordMismatch(CarlogError):
    message = "As novas senhas não coincidem."


class PasswordTooShort(CarlogError):
    message = "A nova senha deve ter pelo menos 4 caracteres."


class NotLoggedIn(CarlogError):
    message = "Nenhum usuário conectado. Entre com 'carlog login'."


class VehicleNotFound(CarlogError):
    message = "Veículo não encontrado."


class RecordNotFound(CarlogError):
    message = "Registro não encontrado."


class InvalidField(CarlogError):
    message = "Valor inválido."


class InsightUnavailable(CarlogError):
    message = "Desculpe, não consegui analisar o histórico agora. Tente novamente mais tarde."
