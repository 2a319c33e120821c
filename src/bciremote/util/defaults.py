# -*- coding: utf-8 -*-

DEFAULT_HOST_ADDR = "127.0.0.1"
DEFAULT_PORT = 3999  # operator telnet port
DEFAULT_TIMEOUT = 5  # seconds, for opening the connection
DEFAULT_LOGLEVEL = "INFO"
TEST_LOGLEVEL = "TRACE"

PROMPT = ">"
LINE_ENDING = "\r\n"
