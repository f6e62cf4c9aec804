from diagen.ir.diagram import DiagramEdge, DiagramNode, DiagramPayload, Position

__all__ = ["DiagramEdge", "DiagramNode", "DiagramPayload", "Position"]
