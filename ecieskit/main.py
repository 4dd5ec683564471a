"""
ecieskit - Main Entry Point
Round-trip demonstration of ECIES over every supported curve.

Run with: python -m ecieskit.main
"""

from .config import EciesConfig
from .core_crypto.key_agreement import KeyPair, CURVES, uncompressed_point_size
from .engine.pipeline import create_engine
from .engine.framing import FRAMINGS
from .integration.event_logger import EventLogger, EventType


def main():
    """Main entry point for ecieskit."""
    print("=" * 50)
    print("Welcome to ecieskit")
    print("=" * 50)

    audit = EventLogger()
    message = b"Hello Bob! This message is for you only."

    print("\nCurves:")
    for curve in CURVES:
        config = EciesConfig.for_curve(curve)
        engine = create_engine(config)
        recipient = KeyPair.generate(curve)

        wire = engine.encrypt(message, recipient.public_key, observer=audit)
        decrypted = engine.decrypt(wire, recipient.private_key, observer=audit)

        status = "OK" if decrypted == message else "MISMATCH"
        print(f"  {curve:<10} AES-{config.key_size * 8}  "
              f"point {uncompressed_point_size(curve):>3} B  "
              f"wire {len(wire):>3} B  {status}")

    print("\nFramings (secp256r1):")
    recipient = KeyPair.generate()
    for name in FRAMINGS:
        engine = create_engine(framing=name)
        wire = engine.encrypt(message, recipient, observer=audit)
        decrypted = engine.decrypt(wire, recipient, observer=audit)
        print(f"  {name:<16} {type(wire).__name__:<18} "
              f"{'OK' if decrypted == message else 'MISMATCH'}")

    failures = audit.get_events_by_type(EventType.OPERATION_FAILED)
    print(f"\nEvents logged: {audit.count}, failures: {len(failures)}")
    audit.print_audit_log(last_n=6)


if __name__ == "__main__":
    main()
