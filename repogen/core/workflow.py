from enum import Enum

class GenerationStage(str, Enum):
    EXTRACT = "EXTRACT"
    GROUP = "GROUP"
    ASSEMBLE = "ASSEMBLE"
    SYNTHESIZE = "SYNTHESIZE"
    WRITE = "WRITE"

    def __str__(self) -> str:
        return self.value
