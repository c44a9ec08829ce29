"""RTP header extension payloads and AV1, H.264, G.711 and G.722 payloaders and depacketizers."""

__version__ = "0.1.0"