"""Application context with dependency injection."""

from dataclasses import dataclass
from pathlib import Path

from permazip.core.assets.abc import AssetSource
from permazip.core.assets.real import FilesystemAssetSource
from permazip.core.config_store import ConfigStore, FilesystemConfigStore, PermazipConfig
from permazip.core.delivery import TokenSigner
from permazip.core.notifier.abc import Notifier, NullNotifier
from permazip.core.notifier.real import HttpNotifier
from permazip.core.options.abc import OptionStore, get_or_create_secret
from permazip.core.options.real import JsonFileOptionStore
from permazip.core.time.abc import Time
from permazip.core.time.real import RealTime


@dataclass(frozen=True)
class PermazipContext:
    """Immutable context holding all dependencies for permazip operations.

    Created at the CLI or server entry point and threaded through the
    application. The signer is built once from the persisted secret.
    """

    config: PermazipConfig
    config_store: ConfigStore
    options: OptionStore
    assets: AssetSource
    notifier: Notifier
    time: Time
    signer: TokenSigner

    @staticmethod
    def for_test(
        config: PermazipConfig | None = None,
        config_store: ConfigStore | None = None,
        options: OptionStore | None = None,
        assets: AssetSource | None = None,
        notifier: Notifier | None = None,
        time: Time | None = None,
        secret: str = "test-secret",
    ) -> "PermazipContext":
        """Create test context with optional pre-configured integration classes.

        Args:
            config: Optional config. If None, uses defaults under /test/content.
            config_store: Optional ConfigStore. If None, an InMemoryConfigStore
                holding config.
            options: Optional OptionStore. If None, creates empty FakeOptionStore.
            assets: Optional AssetSource. If None, creates empty FakeAssetSource.
            notifier: Optional Notifier. If None, creates FakeNotifier.
            time: Optional Time. If None, creates FakeTime.
            secret: Secret used for the signer (stored in options).

        Returns:
            PermazipContext configured with provided values and test defaults
        """
        from permazip.core.assets.fake import FakeAssetSource
        from permazip.core.config_store import InMemoryConfigStore
        from permazip.core.notifier.fake import FakeNotifier
        from permazip.core.options.abc import SECRET_KEY_OPTION
        from permazip.core.options.fake import FakeOptionStore
        from permazip.core.time.fake import FakeTime

        if config is None:
            config = PermazipConfig.for_content_dir(Path("/test/content"))
        if options is None:
            options = FakeOptionStore({SECRET_KEY_OPTION: secret})
        elif options.get(SECRET_KEY_OPTION) is None:
            options.set(SECRET_KEY_OPTION, secret)

        return PermazipContext(
            config=config,
            config_store=config_store or InMemoryConfigStore(config),
            options=options,
            assets=assets or FakeAssetSource(),
            notifier=notifier or FakeNotifier(),
            time=time or FakeTime(),
            signer=TokenSigner(
                secret=get_or_create_secret(options), site_identity=config.site_url
            ),
        )


def create_context(config_store: ConfigStore | None = None) -> PermazipContext:
    """Create production context with real implementations.

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the config file is malformed
    """
    store = config_store or FilesystemConfigStore()
    config = store.load()
    options = JsonFileOptionStore(config.options_path)
    notifier: Notifier = HttpNotifier(config.webhook_url) if config.webhook_url else NullNotifier()

    return PermazipContext(
        config=config,
        config_store=store,
        options=options,
        assets=FilesystemAssetSource(config.plugins_dir, config.themes_dir),
        notifier=notifier,
        time=RealTime(),
        signer=TokenSigner(secret=get_or_create_secret(options), site_identity=config.site_url),
    )
