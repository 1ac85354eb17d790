# invoiceling

A small command-line invoicing tool for freelancers. Clients and invoices are stored
as JSON files in plain directories, one file per record. Your own details, bank
information and standard notes sit in one configuration file. Any invoice can be
rendered to a one-page A4 PDF with English or Spanish labels. A draft version carries
a "DRAFT" watermark.

## Installation

```
pip install .
```

This installs the `invoiceling` command. It needs PyYAML and Pillow.

## Getting started

Run `init` in an empty folder to set it up:

```
invoiceling init            # writes config.yaml
invoiceling init -f json    # or -f yml for config.yml
```

This creates the `client/`, `invoice/`, `pdf/` and `static/` directories, skipping any
that already exist. It also writes a configuration file filled with placeholder
values. If the folder already has a configuration file, `init` leaves it alone.

The configuration file has these sections:

- `freelancer`: company, name, email, phone, VAT id and two address lines
- `payment`: account holder, IBAN and SWIFT code
- `invoice`: currency code (`EUR` by default), logo path (`./static/logo.png`) and
  id format (`F%s-%03d`, which gives the two-digit year and then a three-digit
  sequence number, as in `F25-001`)
- `notes`: standard notes for invoices with no due date (`no_due`), with 0 % VAT
  (`vat_0`) and with a retention applied (`retention_not_0`)
- `dirs`: where clients, invoices and PDFs are kept
- `debug`: a boolean flag, `false` by default

When no `--config` path is given, the command looks in the current directory for
`config.json`, `config.toml`, `config.yaml` or `config.yml`, in that order. TOML is
read but not written. A setting can be overridden by an environment variable named
after its upper-cased key. For example, `VAT` sets the default VAT for
`invoice create`.

Global options are `--config PATH` and `--version`.

## Clients

```
invoiceling client create -n "ACME Ltd" -v ESB12345678 -s "Main Street 1" -c "Madrid, Spain"
invoiceling client                 # list every client: "ID: Name | VAT_ID"
invoiceling client -f ACME         # list clients whose id, name, VAT id or address contains "ACME"
```

`-n`, `-v` and `-s` are required. `-i` sets the client id. Without it, the id is
`client-<VAT id>`. Before the client is stored, the VAT id is checked against the
pattern for its EU country prefix (for example `ES`, `DE` or `FR`). An unknown prefix
or a number that does not fit the pattern is rejected. Creating a client whose id is
already taken fails.

## Invoices

```
invoiceling invoice create -c <client-id> -d 30 -v 21 -r 15
invoiceling invoice item -i F25-001 -d "Consulting" -r 500 -q 3
invoiceling invoice                # list: "ID: Client | Date | Due"
```

`invoice create` copies your freelancer details, payment details, logo path and
currency from the configuration into the invoice. It also copies the client record.
Its options are:

- `-c`: client id (required)
- `-i`: sequence number. Without it, the number after the last stored invoice is
  used, with invoices taken in file-name order.
- `-d`: days until due (30 by default)
- `-v`: VAT percentage. Without it, the `vat` setting is used.
- `-r`: retention (IRPF) percentage. Without it, the `retention` setting is used.
- `-n`: the invoice note

A due span of `0` days appends the configured `no_due` note. A VAT of 0 % adds the
`vat_0` note, and a non-zero retention adds the `retention_not_0` note.

`invoice item` adds a line to an invoice. Its options are `-i` (invoice id), `-d`
(description) and `-r` (rate), all required, plus `-q` (quantity, 1 by default) and
`-v` (VAT). An item without its own VAT takes the invoice's VAT.

## PDF output

```
invoiceling pdf -i F25-001               # <dirs.pdf>/F25-001.pdf
invoiceling pdf -i F25-001 -d            # <dirs.pdf>/F25-001_DRAFT.pdf, watermarked
invoiceling pdf -i F25-001 -l es         # Spanish labels
```

The page begins with a header holding the invoice number, the date and, when the
span is positive, the due date. The logo appears there too, scaled to 100 points
high. Below the header come the sender and client blocks, the item table, the
payment details, and the totals: subtotal, VAT, retention and total. The notes are
printed at the foot of the page.

`-r` picks the renderer. `Basic` is the only one, and any other name falls back to
it. Text is set in the standard Helvetica fonts with Windows-1252 encoding.
Characters outside that set are replaced.

The logo path is stored in each invoice when the invoice is created. If that file
does not exist, or Pillow cannot read it, rendering fails. Either place an image at
the configured path or set `invoice.logo` to an empty string.

Failures such as a missing client or invoice, a rejected VAT id or an unreadable
file are printed as `Error: ...`, and the command exits with status 1.

## Limitations

- No command edits or deletes a client or an invoice. The repositories and services
  have `update` and `delete` methods for library use. `delete` empties the record's
  file and makes it read-only, so the record no longer shows up in listings.
- The invoice `discount` field is stored but not applied to the totals.
- Everything goes on a single page. Long item lists are not carried onto further
  pages.
- The `debug` setting is read into `DocumentService.debug` but does not change the
  PDF.

## Using it as a library

- `invoiceling.model`: `Invoice`, `Item`, `Client`, `Freelancer`, `Payment`, `TaxInfo`,
  `Notes`, `new_invoice` and `currency_symbol`.
- `invoiceling.repository`: `FsClientRepository`, `FsInvoiceRepository`, and the errors
  `RepositoryError`, `RecordExistsError` and `RecordNotFoundError`.
- `invoiceling.config`: `Config`, `ConfigRepo` and `apply_defaults`.
- `invoiceling.service`: `ClientService`, `InvoiceService`, `DocumentService`,
  `validate_vat_number` (raises `VatFormatError` or `CountryNotFoundError`) and the
  `Renderer` protocol.
- `invoiceling.container`: `new_client_service`, `new_invoice_service` and
  `new_document_service`, which build services from a `Config`.
- `invoiceling.i18n`: `Language`, `Translator`, `parse_language`.
- `invoiceling.render`: `PdfBasicRenderer`.
- `invoiceling.pdf`: `PdfCanvas`, the single-page PDF writer it draws on.