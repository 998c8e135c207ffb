#!/usr/bin/env python3
"""
Client GUI - PyQt6 Chat Window

Features:
- Connect / disconnect with a display name
- Message area, pre-filled from the local chat history file
- Active user list, sorted case-insensitively
- Search over received messages or active users
"""

import os
import sys
from typing import List

# PyQt6 imports
from PyQt6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QLabel,
    QPushButton, QTextEdit, QLineEdit, QListWidget, QComboBox, QGroupBox,
    QMessageBox
)
from PyQt6.QtCore import QThread, pyqtSignal
from PyQt6.QtGui import QFont

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
from client.chat.chat_client import ChatClient
from client.utils.config import ClientConfig
from client.utils.history import find_name, load_history, search_messages, search_users, sort_names
from client.utils.logger import logger
from common.constants import DEFAULT_HOST, DEFAULT_PORT, CHAT_HISTORY_FILE


SEARCH_MESSAGES = "Messages"
SEARCH_USERS = "Users"


class ConnectWorker(QThread):
    """Runs the blocking connect handshake off the GUI thread."""

    finished_with_result = pyqtSignal(bool, str)  # success, username

    def __init__(self, chat_client: ChatClient, username: str):
        super().__init__()
        self.chat_client = chat_client
        self.username = username

    def run(self):
        success = self.chat_client.connect(self.username)
        self.finished_with_result.emit(success, self.username)


class ChatClientGUI(QMainWindow):
    """Main chat window."""

    # Signals to marshal network callbacks to the GUI thread
    message_received = pyqtSignal(str)
    user_list_received = pyqtSignal(list)
    connection_status_changed = pyqtSignal(bool)

    def __init__(self, server_host: str = DEFAULT_HOST, server_port: int = DEFAULT_PORT,
                 history_file: str = CHAT_HISTORY_FILE):
        super().__init__()
        self.config = ClientConfig(server_host, server_port, history_file=history_file)
        self.chat_history: List[str] = []
        self.connect_worker = None

        self.setup_ui()
        self.apply_dark_theme()

        self.chat_client = ChatClient(self.config)
        self.setup_client_handlers()
        self.load_chat_history()

    def setup_ui(self):
        """Setup window layout."""
        self.setWindowTitle("Chat Client")
        self.resize(800, 600)

        central = QWidget()
        layout = QVBoxLayout()
        layout.setSpacing(10)
        layout.setContentsMargins(10, 10, 10, 10)

        # Connection row
        connection_layout = QHBoxLayout()
        connection_layout.addWidget(QLabel("Username:"))
        self.username_field = QLineEdit()
        self.username_field.returnPressed.connect(self.connect_to_server)
        connection_layout.addWidget(self.username_field)
        self.connect_button = QPushButton("Connect")
        self.connect_button.clicked.connect(self.connect_to_server)
        connection_layout.addWidget(self.connect_button)
        self.disconnect_button = QPushButton("Disconnect")
        self.disconnect_button.setEnabled(False)
        self.disconnect_button.clicked.connect(self.disconnect_from_server)
        connection_layout.addWidget(self.disconnect_button)
        connection_layout.addStretch()
        layout.addLayout(connection_layout)

        # Search row
        search_layout = QHBoxLayout()
        search_layout.addWidget(QLabel("Search:"))
        self.search_field = QLineEdit()
        self.search_field.returnPressed.connect(self.perform_search)
        search_layout.addWidget(self.search_field)
        self.search_type_combo = QComboBox()
        self.search_type_combo.addItems([SEARCH_MESSAGES, SEARCH_USERS])
        search_layout.addWidget(self.search_type_combo)
        self.search_button = QPushButton("Search")
        self.search_button.clicked.connect(self.perform_search)
        search_layout.addWidget(self.search_button)
        search_layout.addStretch()
        layout.addLayout(search_layout)

        # Messages and users
        center_layout = QHBoxLayout()

        messages_box = QGroupBox("Messages")
        messages_layout = QVBoxLayout()
        self.message_area = QTextEdit()
        self.message_area.setReadOnly(True)
        self.message_area.setFont(QFont("Monospace", 10))
        messages_layout.addWidget(self.message_area)
        messages_box.setLayout(messages_layout)
        center_layout.addWidget(messages_box, stretch=1)

        users_box = QGroupBox("Active Users")
        users_layout = QVBoxLayout()
        self.user_list = QListWidget()
        users_layout.addWidget(self.user_list)
        users_box.setLayout(users_layout)
        users_box.setFixedWidth(180)
        center_layout.addWidget(users_box)

        layout.addLayout(center_layout, stretch=1)

        # Input row
        input_layout = QHBoxLayout()
        self.message_field = QLineEdit()
        self.message_field.setPlaceholderText("Type a message...")
        self.message_field.setEnabled(False)
        self.message_field.returnPressed.connect(self.send_message)
        input_layout.addWidget(self.message_field)
        self.send_button = QPushButton("Send")
        self.send_button.setEnabled(False)
        self.send_button.clicked.connect(self.send_message)
        input_layout.addWidget(self.send_button)
        layout.addLayout(input_layout)

        central.setLayout(layout)
        self.setCentralWidget(central)

    def apply_dark_theme(self):
        """Apply dark theme to application."""
        self.setStyleSheet("""
            QMainWindow, QWidget {
                background-color: #2C3E50;
                color: #ECF0F1;
            }
            QTextEdit, QListWidget, QLineEdit, QComboBox {
                background-color: #34495E;
                color: #ECF0F1;
                border: 1px solid #2C3E50;
                border-radius: 5px;
                padding: 4px;
            }
            QPushButton {
                background-color: #3498DB;
                color: white;
                border: none;
                padding: 6px 12px;
                border-radius: 5px;
                font-weight: bold;
            }
            QPushButton:hover {
                background-color: #2980B9;
            }
            QPushButton:disabled {
                background-color: #7F8C8D;
            }
        """)

    def setup_client_handlers(self):
        """Route ChatClient callbacks (receiver thread) through Qt signals."""
        self.message_received.connect(self.add_message)
        self.user_list_received.connect(self.update_user_list)
        self.connection_status_changed.connect(self.update_connection_status)

        self.chat_client.set_message_handler(self.message_received.emit)
        self.chat_client.set_user_list_handler(self.user_list_received.emit)
        self.chat_client.set_status_handler(self.connection_status_changed.emit)

    def load_chat_history(self):
        """Show the persisted transcript, if this machine has one."""
        try:
            lines = load_history(self.config.history_file)
        except OSError as e:
            logger.log_error("loading chat history", e)
            return

        if not lines:
            return
        self.message_area.append("--- Chat History ---")
        for line in lines:
            self.add_message(line)
        self.message_area.append("--- End of History ---\n")
        logger.info(f"Loaded {len(lines)} line(s) of chat history")

    def add_message(self, message: str):
        """Append a line to the message area and the searchable history."""
        self.chat_history.append(message)
        self.message_area.append(message)
        scrollbar = self.message_area.verticalScrollBar()
        scrollbar.setValue(scrollbar.maximum())

    def update_user_list(self, users: list):
        """Replace the roster with the sorted names and highlight our own."""
        names = sort_names(users)
        self.user_list.clear()
        self.user_list.addItems(names)

        own = find_name(names, self.chat_client.username)
        if own >= 0:
            self.user_list.setCurrentRow(own)

    def current_users(self) -> List[str]:
        return [self.user_list.item(i).text() for i in range(self.user_list.count())]

    def update_connection_status(self, connected: bool):
        """Enable the controls that make sense for the connection state."""
        self.connect_button.setEnabled(not connected)
        self.disconnect_button.setEnabled(connected)
        self.message_field.setEnabled(connected)
        self.send_button.setEnabled(connected)
        self.username_field.setEnabled(not connected)
        if connected:
            self.connect_button.setText("Connect")
        else:
            self.user_list.clear()

    def connect_to_server(self):
        """Connect with the username from the text field."""
        username = self.username_field.text().strip()
        if not username:
            QMessageBox.critical(self, "Error", "Please enter a username.")
            return

        self.connect_button.setEnabled(False)
        self.connect_button.setText("Connecting...")

        self.connect_worker = ConnectWorker(self.chat_client, username)
        self.connect_worker.finished_with_result.connect(self._on_connect_finished)
        self.connect_worker.start()

    def _on_connect_finished(self, success: bool, username: str):
        if success:
            self.message_area.append(f"Connected to server as {username}")
            self.message_area.append("Type your messages below. Enjoy chatting!\n")
        else:
            QMessageBox.critical(
                self, "Connection Error",
                "Failed to connect. Username may be taken or server unavailable."
            )
            self.connect_button.setEnabled(True)
            self.connect_button.setText("Connect")

    def disconnect_from_server(self):
        self.chat_client.disconnect()
        self.message_area.append("\nDisconnected from server.")

    def send_message(self):
        """Send the typed line."""
        text = self.message_field.text().strip()
        if text and self.chat_client.is_connected:
            self.chat_client.send_message(text)
            self.message_field.clear()

    def perform_search(self):
        """Search messages or users for the keyword in the search field."""
        keyword = self.search_field.text().strip()
        if not keyword:
            QMessageBox.information(self, "Search", "Please enter a search term.")
            return

        if self.search_type_combo.currentText() == SEARCH_MESSAGES:
            results = search_messages(self.chat_history, keyword)
            empty_text = f"No messages found containing: {keyword}"
            label = "message(s)"
        else:
            results = search_users(self.current_users(), keyword)
            empty_text = f"No users found matching: {keyword}"
            label = "user(s)"

        if not results:
            QMessageBox.information(self, "Search Results", empty_text)
        else:
            text = f"Found {len(results)} {label}:\n\n" + "\n".join(results)
            QMessageBox.information(self, "Search Results", text)

    def closeEvent(self, event):
        """Leave the chat when the window closes."""
        if self.chat_client.is_connected:
            self.chat_client.disconnect()
        if self.connect_worker is not None:
            self.connect_worker.wait(2000)
        super().closeEvent(event)


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

def main():
    """Main entry point."""
    app = QApplication(sys.argv)

    # Get server address from environment or use default
    config = ClientConfig.from_env()

    window = ChatClientGUI(config.host, config.port, config.history_file)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
