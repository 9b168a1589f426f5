from __future__ import annotations

import os

TRUE_STRINGS = ("1", "true", "t")


class __Config:
    def __init__(self) -> None:
        self.__command_pooling: bool | None = None
        self.__command_pool_size: int | None = None

    @property
    def runtime_checks(self) -> bool:
        """
        Whether runtime type checks are to be enabled.
        Can be enabled by setting the environment variable ``RESPACT_RUNTIME_CHECKS`` to ``true``
        """
        return os.environ.get("RESPACT_RUNTIME_CHECKS", "").lower() in TRUE_STRINGS

    @property
    def command_pooling(self) -> bool:
        """
        Whether command objects are recycled after their reply has been
        decoded successfully. Enabled by default, and can be disabled in any
        of the following ways:

          - By setting the environment variable ``RESPACT_COMMAND_POOLING`` to ``false``
          - By explicitly setting ``respact.Config.command_pooling = False``

        Setting it back to ``None`` restores the environment derived value.
        Commands remain single use either way.
        """
        if self.__command_pooling is not None:
            return self.__command_pooling
        return os.environ.get("RESPACT_COMMAND_POOLING", "true").lower() in TRUE_STRINGS

    @command_pooling.setter
    def command_pooling(self, value: bool | None) -> None:
        self.__command_pooling = value

    @property
    def command_pool_size(self) -> int:
        """
        Maximum number of idle command objects kept for reuse.
        Defaults to ``1024`` and can be changed with the environment variable
        ``RESPACT_COMMAND_POOL_SIZE``
        """
        if self.__command_pool_size is not None:
            return self.__command_pool_size
        return int(os.environ.get("RESPACT_COMMAND_POOL_SIZE", "1024"))

    @command_pool_size.setter
    def command_pool_size(self, value: int | None) -> None:
        self.__command_pool_size = value


#: Used to configure global behaviors of the respact library
Config = __Config()
