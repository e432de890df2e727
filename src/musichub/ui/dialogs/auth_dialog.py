from PySide6.QtWidgets import (
    QDialog, QFormLayout, QHBoxLayout, QLabel, QLineEdit, QPushButton, QTabWidget, QVBoxLayout, QWidget,
)


class AuthDialog(QDialog):
    """Sign in / create account. Closes itself once the Authenticator reports success."""

    def __init__(self, app_state, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Sign in to MusicHub")
        self.resize(380, 260)
        self.auth = app_state.auth

        layout = QVBoxLayout(self)
        self.tabs = QTabWidget()
        layout.addWidget(self.tabs)

        # --- login ---
        login = QWidget()
        form = QFormLayout(login)
        self.login_email = QLineEdit()
        self.login_password = QLineEdit()
        self.login_password.setEchoMode(QLineEdit.EchoMode.Password)
        form.addRow("Email", self.login_email)
        form.addRow("Password", self.login_password)
        self.tabs.addTab(login, "Sign in")

        # --- register ---
        register = QWidget()
        form = QFormLayout(register)
        self.reg_username = QLineEdit()
        self.reg_email = QLineEdit()
        self.reg_password = QLineEdit()
        self.reg_password.setEchoMode(QLineEdit.EchoMode.Password)
        form.addRow("Username", self.reg_username)
        form.addRow("Email", self.reg_email)
        form.addRow("Password", self.reg_password)
        self.tabs.addTab(register, "Create account")

        self.lbl_error = QLabel("")
        self.lbl_error.setStyleSheet("color: #ef4444;")
        self.lbl_error.setWordWrap(True)
        layout.addWidget(self.lbl_error)

        buttons = QHBoxLayout()
        buttons.addStretch(1)
        self.btn_cancel = QPushButton("Cancel")
        self.btn_submit = QPushButton("Continue")
        self.btn_submit.setDefault(True)
        buttons.addWidget(self.btn_cancel)
        buttons.addWidget(self.btn_submit)
        layout.addLayout(buttons)

        self.btn_cancel.clicked.connect(self.reject)
        self.btn_submit.clicked.connect(self._submit)
        self.auth.finished.connect(self._on_finished)

    def _submit(self):
        self.lbl_error.setText("")
        self.btn_submit.setEnabled(False)
        if self.tabs.currentIndex() == 0:
            self.auth.login(self.login_email.text(), self.login_password.text())
        else:
            self.auth.register(self.reg_username.text(), self.reg_email.text(), self.reg_password.text())

    def _on_finished(self, ok: bool, message: str):
        self.btn_submit.setEnabled(True)
        if ok:
            self.accept()
        else:
            self.lbl_error.setText(message)

    def done(self, result):
        self.auth.finished.disconnect(self._on_finished)
        super().done(result)
