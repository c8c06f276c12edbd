import enum


class LogoPosition(str, enum.Enum):
    HEADER = "header"
    COVER = "cover"
    FOOTER = "footer"
