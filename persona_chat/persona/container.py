# persona_chat/persona/container.py
from dependency_injector import containers, providers

from .repository import PersonaRepository
from .settings import PersonaSettings


class PersonaContainer(containers.DeclarativeContainer):
    """Persona 모듈 DI Container"""

    settings = providers.Singleton(PersonaSettings)

    repository = providers.Singleton(
        PersonaRepository.from_file,
        path=settings.provided.PERSONA_FILE,
    )


def create_persona_container() -> PersonaContainer:
    return PersonaContainer()
