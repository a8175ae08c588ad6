from llnd_portal.core.base_config import CamelModel


class RegistrationData(CamelModel):
    full_name: str = ""
    email: str = ""
    phone: str = ""
    password: str = ""


class Declaration(CamelModel):
    honest: bool = False
    understand: bool = False
    name: str = ""
