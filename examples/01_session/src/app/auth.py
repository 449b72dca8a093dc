from abc import ABC, abstractmethod


class Authenticated(ABC):
    @abstractmethod
    def user(self) -> str: ...
