from abc import ABC, abstractmethod


class BaseTransform(ABC):
    """
    An abstract class representing a rewrite applied to every source file before it is hashed and packaged.

    Implementations decide on their own whether a file opts out of the rewrite, typically through directives embedded
    in the source text.
    """

    name: str = ""

    @abstractmethod
    def transform(self, source: str) -> str:
        """
        Returns the rewritten source text.

        :raises TransformError: If the source cannot be understood.
        """
        ...

    def __call__(self, source: str) -> str:
        return self.transform(source)
