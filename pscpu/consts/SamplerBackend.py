from enum import Enum


class SamplerBackend(Enum):
    PS = "ps"
    PSUTIL = "psutil"
