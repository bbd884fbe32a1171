"""
zugferd-extract Konfiguration
Pydantic Settings Management für alle Umgebungsvariablen (Präfix ZUGFERD_)
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Hauptkonfiguration für zugferd-extract"""

    model_config = SettingsConfigDict(
        env_prefix="ZUGFERD_",
        env_file=".env",
        env_file_encoding='utf-8',
        case_sensitive=False,
    )

    # Allgemeine Einstellungen
    app_name: str = "zugferd-extract"
    app_version: str = "0.1.0"

    # Standardisierte Anhangsnamen, falls weder --name noch /Metadata einen Namen liefern
    default_attachment_names: List[str] = Field(default=["factur-x.xml", "xrechnung.xml"])

    # Endung für die Suffix-Suche im Lenient-Modus
    fallback_suffix: str = Field(default=".xml")

    # Ausgabepfad ohne explizite Angabe: Eingabepfad mit dieser Endung
    output_suffix: str = Field(default=".pdf.xml")

    # pypdf im strikten Modus betreiben (kaputte xref-Tabellen werden dann nicht repariert)
    strict_pdf_parsing: bool = Field(default=False)

    # Logging
    log_level: str = Field(default="WARNING")


# Globale Settings Instanz
settings = Settings()
