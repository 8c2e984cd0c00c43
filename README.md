# configmapper

`configmapper` provides the pieces for loading configuration values:

* value sources that read typed values from the environment, from memory or
  from a feature-hub server,
* preprocessors that decode raw strings marked with a syntax prefix, and
* validation rules for numbers, strings and durations.

It has no dependencies outside the standard library.

## Installation

```
pip install configmapper
```

To run the test suite as well:

```
pip install "configmapper[test]"
pytest
```

## Value sources (`configmapper.inputs`, `configmapper.featurehub`)

Every source implements the abstract `ValueInput` interface, which has these
methods: `get_string`, `get_number`, `get_boolean`, `has`, `can_refresh` and
`reload`. Each source also has a class attribute `name`.

* `OsEnvInput(environ=None)` reads from `os.environ`, or from the mapping you
  pass in. A missing key raises `KeyNotFoundError`. Numbers are parsed
  strictly, and booleans accept `1 t T TRUE true True` and
  `0 f F FALSE false False` (the same rules as `parse_bool`). This source
  cannot be refreshed, and `reload()` raises `RuntimeError`.
* `InputMock` is an in-memory source for tests. It holds separate dictionaries
  `keys_str`, `keys_number` and `keys_bool`.
  `should_error(key, exc)` makes every lookup of a key raise `exc`, and
  `should_return(key)` removes that behaviour again. `has()` looks only at
  `keys_str`.
* `FHInput(addr, api_key, timeout=10.0)` fetches
  `<addr>/features/?apiKey=<api_key>` as soon as it is created. A
  non-200 answer raises `ConnectionError`, and a malformed response raises
  `ValueError`. After that:
  * A value is returned only when the feature's type matches the call:
    `STRING` for `get_string`, `NUMBER` for `get_number` and `BOOLEAN` for
    `get_boolean`. Any other type raises `TypeError`.
  * `reload()` fetches again and raises `RuntimeError` on failure.
  * `auto_refreshing(True, interval)` starts a background thread that
    refetches every `interval`. The interval defaults to 30 seconds when it is
    zero. `stop()` ends the thread.
  * `len()` gives the number of features, and `refresh_count` counts the
    successful background refreshes.

`parse_features(data)` turns a server response into a dictionary that maps
each key to its `FHValue`. It reads the first `FeatureHubEnvironment` in the
response.

## Syntax prefixes and preprocessors

`configmapper.syntax.Syntax` is an enum of the prefixes a raw value may start
with. `Syntax.matches(value)` tests for a prefix, and `Syntax.strip(value)`
removes it.

`configmapper.preprocessors.Preprocessors(enabled=False)` applies the
prefixes. While it is disabled, every check treats the value as unmarked.

| Prefix             | Method                | Result                                             |
|--------------------|-----------------------|----------------------------------------------------|
| `base64.decode::`  | `check_string`        | the decoded text                                   |
| `base64.encode::`  | `check_string`        | the base64-encoded text                            |
| `url.encode::`     | `check_string`        | the query-escaped text                             |
| `url.decode::`     | `check_string`        | the query-unescaped text                           |
| `url::`            | `check_string`        | the URL, checked against a `protocols` rule        |
| `time.duration::`  | `check_time_duration` | a `timedelta`; zero if absent or invalid           |
| `data.size::`      | `check_data_size`     | bytes, e.g. `20kb` → 20480; `ValueError` if absent |
| `json.object::`    | `check_object`        | the decoded JSON value; `None` if absent           |
| `array.int::`      | `check_int_array`     | a list of ints; bad items are skipped              |
| `array.float::`    | `check_float_array`   | a list of floats; bad items are skipped            |
| `array.string::`   | `check_str_array`     | the comma-separated parts                          |

`check_string(value, rules)` returns a pair `(new_value, syntax_used)`:

* When nothing applies, `syntax_used` is `None`.
* When decoding fails, the value comes back undecoded and `syntax_used` is
  `None`.
* A URL whose scheme is not in the `protocols` rule raises `ValidationError`.

The helpers behind these checks can also be called on their own:
`base64_decode`, `base64_encode`, `url_encode`, `url_decode`,
`url_parse(value, rules)`, `time_duration_parse`, `parse_data_size` and
`is_data_size`.

## Validation (`configmapper.validators`)

* `parse_duration(text)` parses durations such as `300s`, `1h30m` or `-1.5ms`
  into a `timedelta`.
* `validate_range_numbers(value, "low..high")`,
  `validate_numbers_set(value, "1,3,11")`, `validate_string_set(value, "a,b")`,
  `validate_greater_than` / `validate_less_than` and their `_time_duration`
  variants return the value when it passes. When it does not, they raise
  `ValidationError`. For an integer value, the range and set bounds are
  truncated to integers before comparing.
* `validate_numbers(value, rules)`, `validate_strings(value, rules)` and
  `validate_time_durations(value, rules)` take a mapping of rule names to rule
  text and apply the first rule that is present. The rule names are `set`,
  `range`, `greaterThan`, `lessThan`, `required` and `protocols`, available as
  the constants `VD_*`. For numbers, a `greaterThan` or `lessThan` rule is read
  as a `low..high` range.

`NotFoundError` is also defined there, for a key that no source provides.

## Array-style key names (`configmapper.utils`)

`check_name_is_array_and_get_index("USERS_IDS[3]")` returns
`("USERS_IDS", 3)`. It returns `None` for keys that do not end in a
non-negative `[index]`.

## What this package does not do

The package has no component that walks a configuration object's fields,
looks each key up across several sources in priority order, applies
defaults, `skips` lists and `required` checks, and collects the errors per
field. You combine the sources, preprocessors and validators yourself. It
also installs no command-line program.