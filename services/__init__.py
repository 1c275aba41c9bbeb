# Services module for QR Salvage
# Scan services live in services/impl/, the controller wires them:
# from services.scan_controller import ScanController

__all__ = []
