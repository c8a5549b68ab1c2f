from PyQt6.QtCore import QSettings

DEFAULT_COLLECTION = "groceries"

class SettingsManager:
    def __init__(self, organization_name: str, application_name: str):
        self.settings = QSettings(organization_name, application_name)

    def load_debug_mode(self) -> bool:
        """Loads permanent debug mode setting."""
        return self.settings.value("debug/enabled", False, type=bool)

    def save_debug_mode(self, enabled: bool):
        """Saves permanent debug mode setting."""
        self.settings.setValue("debug/enabled", enabled)
        self.settings.sync()

    def load_connection_settings(self) -> dict:
        return {
            "collection": self.settings.value(
                "firestore/collection", DEFAULT_COLLECTION, type=str
            ),
            "project_id": self.settings.value("firestore/project_id", "", type=str),
            "credentials_path": self.settings.value(
                "firestore/credentials_path", "", type=str
            ),
        }

    def save_connection_settings(self, config: dict):
        self.settings.setValue(
            "firestore/collection", config.get("collection") or DEFAULT_COLLECTION
        )
        self.settings.setValue("firestore/project_id", config.get("project_id", ""))
        self.settings.setValue(
            "firestore/credentials_path", config.get("credentials_path", "")
        )
        self.settings.sync()
