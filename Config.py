import os
from dataclasses import dataclass, fields
from enum import Enum


class DeliveryMode(Enum):
    ASAP = "asap"  # send the response the moment it is set
    FINAL = "final"  # send the response after all phases have run
    SUPPRESS = "suppress"  # never send, caller inspects the returned response


class FinalizePolicy(Enum):
    ALWAYS = "always"
    SKIP_ON_FAILURE = "skip_on_failure"


def _env_bool(key: str, default: str = "false") -> bool:
    return os.getenv(key, default).lower() in ["true", "1", "yes", "on"]


@dataclass
class LifecycleConfig:
    index_page_id: int = 1
    max_alias_length: int = 32
    login_url: str = "/login"
    return_parameter: str = "redirect"
    delivery_mode: DeliveryMode = DeliveryMode.FINAL
    finalize_policy: FinalizePolicy = FinalizePolicy.ALWAYS
    default_company_id: int = 1
    default_language_id: int = 1
    database_path: str = ":memory:"
    templates_path: str = "lib/pages"
    debug: bool = False

    @classmethod
    def from_env(cls, **overrides) -> "LifecycleConfig":
        """
        Builds the configuration from PAGECYCLE_* environment variables.
        Keyword arguments win over the environment.

        Example:
            PAGECYCLE_DELIVERY_MODE=asap ➜ LifecycleConfig.delivery_mode == DeliveryMode.ASAP
        """
        unknown = set(overrides) - {f.name for f in fields(cls)}
        if unknown:
            raise ValueError(f"Unknown configuration option(s): {', '.join(sorted(unknown))}")

        config = cls(
            index_page_id=int(os.getenv("PAGECYCLE_INDEX_PAGE_ID", cls.index_page_id)),
            max_alias_length=int(os.getenv("PAGECYCLE_MAX_ALIAS_LENGTH", cls.max_alias_length)),
            login_url=os.getenv("PAGECYCLE_LOGIN_URL", cls.login_url),
            return_parameter=os.getenv("PAGECYCLE_RETURN_PARAMETER", cls.return_parameter),
            delivery_mode=DeliveryMode(os.getenv("PAGECYCLE_DELIVERY_MODE", cls.delivery_mode.value).lower()),
            finalize_policy=FinalizePolicy(os.getenv("PAGECYCLE_FINALIZE_POLICY", cls.finalize_policy.value).lower()),
            default_company_id=int(os.getenv("PAGECYCLE_COMPANY_ID", cls.default_company_id)),
            default_language_id=int(os.getenv("PAGECYCLE_LANGUAGE_ID", cls.default_language_id)),
            database_path=os.getenv("PAGECYCLE_DATABASE", cls.database_path),
            templates_path=os.getenv("PAGECYCLE_TEMPLATES_PATH", cls.templates_path),
            debug=_env_bool("PAGECYCLE_DEBUG"),
        )

        for key, value in overrides.items():
            if key == "delivery_mode" and not isinstance(value, DeliveryMode):
                value = DeliveryMode(value)
            elif key == "finalize_policy" and not isinstance(value, FinalizePolicy):
                value = FinalizePolicy(value)
            setattr(config, key, value)

        return config
