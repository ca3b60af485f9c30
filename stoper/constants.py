from enum import Enum


class ToolModel(str, Enum):
    T45 = "T45"
    T50 = "T50"
    T51 = "T51"


class ToolType(str, Enum):
    PUNHO = "Punho"
    HASTE = "Haste"
    BIT_35 = "Bit 3,5''"
    BIT_45 = "Bit 4,5''"


class Team(str, Enum):
    A = "Turma A"
    B = "Turma B"
    C = "Turma C"
    D = "Turma D"


class Reason(str, Enum):
    DESGASTE = "Desgaste"
    QUEBRA = "Quebra em operação"
    PRESO = "Preso no Furo"
    TRINCA = "Trinca"
    EMPENADA = "Haste empenada"
    CARROSEL = "Completar carrosel"


REASONS = [r.value for r in Reason]

SUPERVISORS = ["Emanuel", "Edson", "Leandro", "Henrique"]

RIG_TAGS = ["PH14", "PH21", "PH22", "PH24"]

# (id, model, type, quantity, min_threshold)
INITIAL_INVENTORY = [
    ("t51-punho", ToolModel.T51, ToolType.PUNHO, 15, 5),
    ("t51-haste", ToolModel.T51, ToolType.HASTE, 20, 8),
    ("t51-bit35", ToolModel.T51, ToolType.BIT_35, 30, 10),
    ("t51-bit45", ToolModel.T51, ToolType.BIT_45, 25, 10),
    ("t50-punho", ToolModel.T50, ToolType.PUNHO, 10, 3),
    ("t50-haste", ToolModel.T50, ToolType.HASTE, 12, 4),
    ("t50-bit45", ToolModel.T50, ToolType.BIT_45, 18, 6),
    ("t45-punho", ToolModel.T45, ToolType.PUNHO, 12, 4),
    ("t45-haste", ToolModel.T45, ToolType.HASTE, 15, 5),
    ("t45-bit35", ToolModel.T45, ToolType.BIT_35, 22, 8),
    ("t45-bit45", ToolModel.T45, ToolType.BIT_45, 20, 8),
]

INSIGHTS_FALLBACK = "Não foi possível carregar os insights no momento."
