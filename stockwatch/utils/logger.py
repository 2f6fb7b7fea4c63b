import logging

# Handlers and format are configured once in stockwatch.main from config.yaml;
# modules only need the shared named logger.
logger = logging.getLogger("StockWatch")
