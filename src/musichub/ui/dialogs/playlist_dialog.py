from PySide6.QtWidgets import (
    QCheckBox, QDialog, QDialogButtonBox, QFormLayout, QLineEdit, QMessageBox, QVBoxLayout,
)


class CreatePlaylistDialog(QDialog):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle("New playlist")
        self.resize(380, 160)

        layout = QVBoxLayout(self)
        form = QFormLayout()
        self.name = QLineEdit()
        self.name.setPlaceholderText("My playlist")
        self.cover = QLineEdit()
        self.cover.setPlaceholderText("Cover image URL (optional)")
        self.public = QCheckBox("Visible to everyone")
        form.addRow("Name", self.name)
        form.addRow("Cover", self.cover)
        form.addRow("", self.public)
        layout.addLayout(form)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel)
        buttons.accepted.connect(self._accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def _accept(self):
        if not self.name.text().strip():
            QMessageBox.warning(self, "Missing name", "Please give the playlist a name.")
            return
        self.accept()

    def values(self) -> tuple[str, str | None, bool]:
        return self.name.text().strip(), (self.cover.text().strip() or None), self.public.isChecked()
