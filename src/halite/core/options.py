"""
Options - слоистая конфигурация клиента и отдельного вызова.

Клиент хранит долгоживущий экземпляр Options; каждый вызов может передать
свой Options (или словарь), который накладывается поверх через merge().
Все операции возвращают НОВЫЙ экземпляр - исходный никогда не изменяется,
что позволяет клиенту заменять свою копию атомарно (copy-then-swap).
"""

import logging
import ssl as ssl_module
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Mapping, Optional, Tuple, Union

from .config import FOLLOW_MAX_HOPS, FOLLOW_STRICT, USER_AGENT, FollowConfig, TimeoutConfig
from .headers import Headers, HeaderInput, cookies_from_headers
from .types import ConfigValue, normalize_map

if TYPE_CHECKING:
    from .logging import HaliteLogger
    from .response import Response

logger = logging.getLogger(__name__)

# Поля, которые заменяются целиком только если заданы явно
_WHOLESALE_FIELDS = ("timeout", "follow", "ssl", "logging", "logger")


def default_headers() -> Headers:
    """Заголовки по умолчанию."""
    return Headers({
        "User-Agent": USER_AGENT,
        "Accept": "*/*",
        "Connection": "keep-alive",
    })


def _freeze(data: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(data))


@dataclass(frozen=True)
class Options:
    """
    Конфигурация запроса: заголовки, куки, таймауты, редиректы и тело.

    Args:
        headers: Заголовки (ключи нормализуются: content_type -> Content-Type)
        cookies: Куки; заголовки Cookie/Set-Cookie из headers тоже попадают сюда
        params: Query параметры
        form: Данные формы (urlencoded или multipart если есть файлы)
        json: JSON тело
        raw: Сырое текстовое тело
        timeout: Таймауты подключения/чтения
        follow: Политика редиректов
        ssl: SSL контекст (передаётся транспорту как есть)
        logging: Логировать запросы и ответы
        logger: Логгер (HaliteLogger); по умолчанию глобальный

    Examples:
        >>> options = Options.create(headers={"private_token": "abc"}, follow=3)
        >>> options.headers["Private-Token"]
        'abc'
        >>> options.merge({"params": {"page": 2}}).params["page"]
        2
    """
    headers: Headers = field(default_factory=Headers)
    cookies: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, ConfigValue] = field(default_factory=dict)
    form: Mapping[str, ConfigValue] = field(default_factory=dict)
    json: Mapping[str, ConfigValue] = field(default_factory=dict)
    raw: Optional[str] = None
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    follow: FollowConfig = field(default_factory=FollowConfig)
    ssl: Optional[ssl_module.SSLContext] = None
    logging: bool = False
    logger: Optional['HaliteLogger'] = None

    # Служебные поля: какие поля заданы явно и какие заголовки пришли из дефолтов
    explicit_fields: Optional[FrozenSet[str]] = field(default=None, repr=False, compare=False)
    defaulted_headers: FrozenSet[str] = field(default=frozenset(), repr=False, compare=False)

    def __post_init__(self):
        """Нормализация значений и вывод кук из заголовков."""
        headers = Headers.escape(self.headers)

        # Дефолтные заголовки не перетирают заданные вызывающим
        defaulted = set(self.defaulted_headers)
        for name, values in default_headers()._store.items():
            if name not in headers:
                headers.set(name, values)
                defaulted.add(name)
        defaulted &= set(headers)

        # Cookie/Set-Cookie живут только в карте кук
        cookies = cookies_from_headers(headers)
        cookies.update({str(k): str(v) for k, v in dict(self.cookies or {}).items()})
        for name in ("Cookie", "Set-Cookie"):
            if name in headers:
                del headers[name]
                defaulted.discard(name)

        if self.raw is not None and isinstance(self.raw, bytes):
            object.__setattr__(self, 'raw', self.raw.decode("utf-8"))

        if self.explicit_fields is None:
            object.__setattr__(self, 'explicit_fields', self._infer_explicit())

        object.__setattr__(self, 'headers', headers)
        object.__setattr__(self, 'defaulted_headers', frozenset(defaulted))
        object.__setattr__(self, 'cookies', _freeze(cookies))
        object.__setattr__(self, 'params', _freeze(normalize_map(self.params)))
        object.__setattr__(self, 'form', _freeze(normalize_map(self.form)))
        object.__setattr__(self, 'json', _freeze(normalize_map(self.json)))

    def _infer_explicit(self) -> FrozenSet[str]:
        explicit = set()
        if self.timeout != TimeoutConfig():
            explicit.add("timeout")
        if self.follow != FollowConfig():
            explicit.add("follow")
        if self.ssl is not None:
            explicit.add("ssl")
        if self.logging:
            explicit.add("logging")
        if self.logger is not None:
            explicit.add("logger")
        return frozenset(explicit)

    @classmethod
    def create(
        cls,
        headers: HeaderInput = None,
        cookies: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, Any]] = None,
        form: Optional[Mapping[str, Any]] = None,
        json: Optional[Mapping[str, Any]] = None,
        raw: Optional[Union[str, bytes]] = None,
        timeout: Union[int, float, Tuple[Any, Any], TimeoutConfig, None] = None,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
        follow: Union[int, bool, FollowConfig, None] = None,
        follow_strict: Optional[bool] = None,
        ssl: Optional[ssl_module.SSLContext] = None,
        logging: Optional[bool] = None,
        logger: Optional['HaliteLogger'] = None,
    ) -> 'Options':
        """
        Удобный конструктор: явно заданными считаются только переданные аргументы.

        Args:
            timeout: Таймаут (число = read, (connect, read) или TimeoutConfig)
            connect_timeout: Таймаут подключения (переопределяет timeout)
            read_timeout: Таймаут чтения (переопределяет timeout)
            follow: Количество редиректов или FollowConfig
            follow_strict: Политика 301/302

        Examples:
            >>> Options.create(timeout=(3, 10)).timeout.connect
            3.0
            >>> Options.create(follow=2, follow_strict=False).follow
            FollowConfig(hops=2, strict=False)
        """
        explicit = set()
        kwargs: Dict[str, Any] = {}

        if timeout is not None or connect_timeout is not None or read_timeout is not None:
            timeout_cfg = TimeoutConfig.coerce(timeout) if timeout is not None else TimeoutConfig()
            if connect_timeout is not None or read_timeout is not None:
                timeout_cfg = TimeoutConfig(
                    connect=connect_timeout if connect_timeout is not None else timeout_cfg.connect,
                    read=read_timeout if read_timeout is not None else timeout_cfg.read,
                )
            kwargs['timeout'] = timeout_cfg
            if timeout is not None or (connect_timeout is not None and read_timeout is not None):
                explicit.add("timeout")
            elif connect_timeout is not None:
                explicit.add("timeout.connect")
            else:
                explicit.add("timeout.read")

        if follow is not None or follow_strict is not None:
            kwargs['follow'] = FollowConfig.coerce(follow if follow is not None else 0, follow_strict)
            # follow_strict без follow задаёт только режим, hops берутся из базы при merge
            explicit.add("follow" if follow is not None else "follow.strict")

        if ssl is not None:
            kwargs['ssl'] = ssl
            explicit.add("ssl")
        if logging is not None:
            kwargs['logging'] = logging
            explicit.add("logging")
        if logger is not None:
            kwargs['logger'] = logger
            explicit.add("logger")
            if logging is None:
                kwargs['logging'] = True
                explicit.add("logging")

        return cls(
            headers=headers,
            cookies=cookies or {},
            params=params or {},
            form=form or {},
            json=json or {},
            raw=raw,
            explicit_fields=frozenset(explicit),
            **kwargs
        )

    # ==================== Merge ====================

    def merge(self, other: Union['Options', Mapping[str, Any], None]) -> 'Options':
        """
        Наложить other поверх self и вернуть новый Options.

        - headers/cookies/params/form/json: ключи из other перетирают или
          добавляются, остальные сохраняются (поверхностно, по ключу)
        - raw: заменяется если задан в other
        - timeout/follow/ssl/logging: заменяются целиком только если заданы явно

        Args:
            other: Options или словарь с ключами Options.create()

        Returns:
            Новый Options; self не изменяется

        Example:
            >>> base = Options.create(headers={"X": "1", "Y": "y"})
            >>> base.merge({"headers": {"X": "2"}}).headers.to_dict()["X"]
            '2'
        """
        if other is None:
            return self
        if not isinstance(other, Options):
            other = Options.create(**dict(other))

        headers = self.headers.copy()
        defaulted = set(self.defaulted_headers)
        for name in other.headers:
            if name in other.defaulted_headers:
                continue
            headers.set(name, other.headers.get_list(name))
            defaulted.discard(name)

        cookies = dict(self.cookies)
        cookies.update(other.cookies)

        changes: Dict[str, Any] = {
            'headers': headers,
            'defaulted_headers': frozenset(defaulted),
            'cookies': cookies,
            'params': {**self.params, **other.params},
            'form': {**self.form, **other.form},
            'json': {**self.json, **other.json},
            'raw': other.raw if other.raw is not None else self.raw,
            'explicit_fields': frozenset(self.explicit_fields | other.explicit_fields),
        }
        for name in _WHOLESALE_FIELDS:
            if name in other.explicit_fields:
                changes[name] = getattr(other, name)

        # Частично заданные timeout/follow: недостающая часть берётся из self
        if "timeout" not in other.explicit_fields:
            if "timeout.connect" in other.explicit_fields or "timeout.read" in other.explicit_fields:
                changes["timeout"] = TimeoutConfig(
                    connect=(other.timeout.connect if "timeout.connect" in other.explicit_fields
                             else self.timeout.connect),
                    read=(other.timeout.read if "timeout.read" in other.explicit_fields
                          else self.timeout.read),
                )
        if "follow" not in other.explicit_fields and "follow.strict" in other.explicit_fields:
            changes["follow"] = FollowConfig(hops=self.follow.hops, strict=other.follow.strict)

        return replace(self, **changes)

    # ==================== Chainable copies ====================

    def with_headers(self, headers: HeaderInput = None, **kwargs: Any) -> 'Options':
        """
        Новый Options с объединёнными заголовками.

        Example:
            >>> Options().with_headers(accept="application/json").headers["Accept"]
            'application/json'
        """
        combined = Headers.escape(headers)
        if kwargs:
            combined.update_all(kwargs)
        return self.merge(Options.create(headers=combined))

    def with_cookies(self, cookies: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> 'Options':
        """Новый Options с объединёнными куками."""
        combined = dict(cookies or {})
        combined.update(kwargs)
        return self.merge(Options.create(cookies=combined))

    def with_follow(self, hops: int = FOLLOW_MAX_HOPS, strict: bool = FOLLOW_STRICT) -> 'Options':
        """
        Новый Options с политикой редиректов.

        Example:
            >>> # До 3 редиректов
            >>> options.with_follow(3)
            >>> # Редиректы в стиле браузеров (301/302 -> GET)
            >>> options.with_follow(strict=False)
        """
        return self.merge(Options.create(follow=FollowConfig(hops=hops, strict=strict)))

    def with_timeout(
        self,
        connect: Optional[float] = None,
        read: Optional[float] = None
    ) -> 'Options':
        """Новый Options с таймаутами (заменяются целиком)."""
        return self.merge(Options.create(timeout=TimeoutConfig(connect=connect, read=read)))

    def with_logging(self, enabled: bool = True, logger: Optional['HaliteLogger'] = None) -> 'Options':
        """Новый Options с включённым/выключенным логированием."""
        return self.merge(Options.create(logging=enabled, logger=logger))

    def absorb_response(self, response: 'Response') -> 'Options':
        """
        Новый Options с куками из Set-Cookie ответа.

        Returns self если ответ не устанавливает куки.
        """
        cookies = response.cookies
        if not cookies:
            return self
        logger.debug("Absorbing %d cookie(s) from %s", len(cookies), response.uri)
        return self.with_cookies(cookies)

    # ==================== Introspection ====================

    @property
    def body_intents(self) -> Tuple[str, ...]:
        """Заполненные намерения тела, в порядке приоритета."""
        intents = []
        if self.form:
            intents.append("form")
        if self.json:
            intents.append("json")
        if self.raw:
            intents.append("raw")
        return tuple(intents)

    def to_dict(self) -> Dict[str, Any]:
        """Вернуть опции как обычный словарь."""
        return {
            "headers": self.headers.to_dict(),
            "cookies": dict(self.cookies),
            "params": dict(self.params),
            "form": dict(self.form),
            "json": dict(self.json),
            "raw": self.raw,
            "connect_timeout": self.timeout.connect,
            "read_timeout": self.timeout.read,
            "follow": self.follow.hops,
            "follow_strict": self.follow.strict,
        }
