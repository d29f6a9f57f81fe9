"""Building blocks of the SRT protocol: configuration, buffers, loss lists, congestion control, payload encryption, key material messages and access control."""

__version__ = "0.3.0"

__all__ = [
    "access_control",
    "aes_ctr",
    "aes_gcm",
    "config",
    "congestion",
    "crypto",
    "file_cc",
    "km_exchange",
    "live_cc",
    "loss_list",
    "rate",
    "receive_buffer",
    "send_buffer",
    "token_bucket",
]