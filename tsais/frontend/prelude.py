"""Ambient declarations of the AiScript runtime.

The standard library and the Misskey host API are declared as TypeScript
declaration text and parsed once by the regular parser. The bound prelude
file provides the global scope every user module resolves against.
"""

from __future__ import annotations

from .ast import SourceFile
from .names import bind_file
from .parse import parse_source

PRELUDE_FILE = "<prelude>"

AISCRIPT_DECLARATIONS = """
interface Array<T> {
    [n: number]: T;
    len: number
    at(index: number): T | null
    push(item: T): void
    pop(): T | null
    concat(array: T[]): T[]
    map<U>(func: (item: T, index: number) => U): U[]
    filter(func: (item: T, index: number) => boolean): T[]
    reduce<U>(func: (accumulator: U, current: T, index: number) => U, initial: U): U
    sort(comparator?: (a: T, b: T) => number): T[]
    reverse(): T[]
    join(separator?: string): string
    find(func: (item: T, index: number) => boolean): T | null
    incl(item: T): boolean
    slice(begin?: number, end?: number): T[]
    copy(): T[]
}

interface Boolean { }

interface Function { }

interface Number {
    to_str(): string
    to_hex(): string
}

interface Object {
    [key: string]: any
}

interface String {
    len: number
    to_num(): number | null
    to_arr(): string[]
    to_unicode_arr(): string[]
    to_unicode_codepoint_arr(): number[]
    to_char_arr(): string[]
    to_charcode_arr(): string[]
    to_utf8_byte_arr(): number[]
    pick(i: number): string | null
    incl(keyword: string): boolean
    starts_with(prefix: string, start_index?: number): boolean
    ends_with(suffix: string, end_index?: number): boolean
    slice(begin?: number, end?: number): string
    split(splitter: string): string[]
    replace(old: string, _new: string): string
    index_of(search: string, fromIndex?: number): number
    pad_start(width: number, pad?: string): string
    trim(): string
    upper(): string
    lower(): string
}

declare namespace Core {
    const v: string
    function type(v: any): string
    function to_str(v: any): string
    function range(a: number, b: number): number[]
    function sleep(time: number): void
    function abort(message: string): never
}

declare namespace Math {
    const Infinity: number
    const E: number
    const LN2: number
    const LN10: number
    const LOG2E: number
    const LOG10E: number
    const PI: number
    const SQRT1_2: number
    const SQRT2: number

    function abs(x: number): number
    function sign(x: number): number
    function round(x: number): number
    function ceil(x: number): number
    function floor(x: number): number
    function trunc(x: number): number
    function min(a: number, b: number): number
    function max(a: number, b: number): number
    function sqrt(x: number): number
    function cbrt(x: number): number
    function hypot(x: number, y: number): number
    function rnd(): number
    function rnd(min: number, max: number): number

    function sin(x: number): number
    function cos(x: number): number
    function tan(x: number): number
    function asin(x: number): number
    function acos(x: number): number
    function atan(x: number): number
    function atan2(y: number, x: number): number

    function sinh(x: number): number
    function cosh(x: number): number
    function tanh(x: number): number
    function asinh(x: number): number
    function acosh(x: number): number
    function atanh(x: number): number

    function pow(base: number, exponent: number): number
    function exp(x: number): number
    function expm1(x: number): number
    function log(x: number): number
    function log1p(x: number): number
    function log10(x: number): number
    function log2(x: number): number
}

declare namespace Util {
    function uuid(): string
}

declare namespace Json {
    function stringify(v: any): string
    function parse(json: string): any
    function parsable(str: string): boolean
}

declare namespace Date {
    function now(): number
    function year(date?: number): number
    function month(date?: number): number
    function day(date?: number): number
    function hour(date?: number): number
    function minute(date?: number): number
    function second(date?: number): number
    function parse(date: string): number
    function to_iso_str(date?: number): string
}

declare namespace Str {
    const lf: string
    function lt(a: string, b: string): number
    function gt(a: string, b: string): number
    function from_codepoint(codepoint: number): string
    function from_unicode_codepoints(codepoints: number[]): string
    function from_utf8_bytes(bytes: number[]): string
}

declare namespace Num {
    function from_hex(hex: string): number
}

declare namespace Uri {
    function encode_full(uri: string): string
    function decode_component(encoded_text: string): string
}

declare namespace Obj {
    function keys<T extends Object>(v: T): keyof T[]
    function vals<T extends Object>(v: T): T[keyof T][]
    function kvs<T extends Object>(v: T): [string, T[keyof T]][]
    function get(v: object, key: string): any
    function set(v: object, key: string, val: any): object
    function has(v: object, key: string): boolean
    function copy(v: object): object
    function merge(a: object, b: object): object
}

declare namespace Arr {
    function create(length: number, initial?: any): any[]
}

declare namespace Async {
    function interval(interval: number, callback: () => void, immediate?: boolean): void
    function timeout(delay: number, callback: () => void): void
}

declare function print(message: string): void;
declare function readline(message: string): string;
"""

MISSKEY_DECLARATIONS = """
declare const USER_ID: string;
declare const USER_NAME: string;
declare const USER_USERNAME: string;
declare const CUSTOM_EMOJIS: {
    aliases: string[];
    name: string;
    category: string | null;
    url: string;
    localOnly?: boolean;
    isSensitive?: boolean;
}[];
declare const LOCALE: string;
declare const SERVER_URL: string;
declare const THIS_ID: string;
declare const THIS_URL: string;

declare namespace Mk {
    function dialog(title: string, text: string, type?: "info" | "success" | "warning" | "error" | "question"): void;
    function toast(text: string): void;
    function confirm(title: string, text: string, type?: "info" | "success" | "warning" | "error" | "question"): boolean;
    function api(endpoint: string, params: { [key: string]: any }, token?: string): any;
    function save(key: string, value: any): void;
    function load(key: string): any;
    function remove(key: string): void;
    function url(): string;
    function nyaize(text: string): string;
}

type Component<T> = {
    id: string;
    update(props: T): void;
};

declare namespace Ui {
    const root: Component<Root>;
    function render(components: Component<any>[]): void;
    function get<T>(id: string): Component<T>;

    type Font = "serif" | "sans-serif" | "monospace";
    type Root = {
        children: Component<any>[];
    };
    type Container = {
        children: Component<any>[];
        align?: "left" | "center" | "right";
        bgColor?: string;
        fgColor?: string;
        font?: Font;
        borderWidth?: number;
        borderColor?: string;
        borderStyle?: "solid";
        padding?: number;
        rounded?: boolean;
        borderRadius?: number;
        hidden?: boolean;
    };
    type Folder = {
        children: Component<any>[];
        title: string;
        opened?: boolean;
    };
    type Text = {
        text: string;
        size?: number;
        bold?: boolean;
        color?: string;
        font?: Font;
    };
    type Mfm = {
        text: string;
        size?: number;
        bold?: boolean;
        color?: string;
        font?: Font;
        onClickEv?: (id: string) => void;
    };
    type Button = {
        text: string;
        onClick: () => void;
        primary?: boolean;
        rounded?: boolean;
        disabled?: boolean;
    };
    type Buttons = {
        buttons: Button[];
    };
    type Switch = {
        onChange: (enabled: boolean) => void;
        default: boolean;
        label: string;
        caption?: string;
    };
    type TextInput = {
        onInput: (text: string) => void;
        default: string;
        label?: string;
        caption?: string;
    };
    type Textarea = {
        onInput: (text: string) => void;
        default: string;
        label?: string;
        caption?: string;
    };
    type Select<T> = {
        items: { text: string; value: T }[];
        onChange: (value: T) => void;
        default: T;
        label?: string;
        caption?: string;
    };
    type PostForm = {
        form: {
            text: string;
            cw?: string;
            visibility?: "home" | "public";
            localOnly?: boolean;
        };
    };
    type PostFormButton = PostForm & {
        text: string;
        primary?: boolean;
        rounded?: boolean;
    };
    const C: {
        container(props: Container): Component<Container>;
        folder(props: Folder): Component<Folder>;
        text(props: Text): Component<Text>;
        mfm(props: Mfm): Component<Mfm>;
        button(props: Button): Component<Button>;
        buttons(props: Buttons): Component<Buttons>;
        switch(props: Switch): Component<Switch>;
        textInput(props: TextInput): Component<TextInput>;
        textarea(props: Textarea): Component<Textarea>;
        select<T>(props: Select<T>): Component<Select<T>>;
        postForm(props: PostForm): Component<PostForm>;
        postFormButton(props: PostFormButton): Component<PostFormButton>;
    };
}
"""

_prelude: SourceFile | None = None


def load_prelude() -> SourceFile:
    """Parse and bind the ambient declarations once per process."""
    global _prelude
    if _prelude is None:
        text = AISCRIPT_DECLARATIONS + MISSKEY_DECLARATIONS
        _prelude = bind_file(parse_source(text, PRELUDE_FILE), None)
    return _prelude
