SAMPLE_NZB = """<?xml version="1.0" encoding="utf-8"?>
<!DOCTYPE nzb PUBLIC "-//newzBin//DTD NZB 1.1//EN" "http://www.newzbin.com/DTD/nzb/nzb-1.1.dtd">
<nzb xmlns="http://www.newzbin.com/DTD/2003/nzb">
  <head>
    <meta type="title">Holiday Video</meta>
    <meta type="password">s3cret</meta>
  </head>
  <file poster="poster@example.com" date="1700000000" subject="[1/2] - &quot;holiday.mkv&quot; yEnc (1/3) 300">
    <groups>
      <group>alt.binaries.test</group>
      <group>alt.binaries.misc</group>
    </groups>
    <segments>
      <segment bytes="100" number="2">mkv-2@example.com</segment>
      <segment bytes="100" number="1">mkv-1@example.com</segment>
      <segment bytes="100" number="3">mkv-3@example.com</segment>
    </segments>
  </file>
  <file poster="poster@example.com" date="1700000001" subject="[2/2] - &quot;holiday.par2&quot; yEnc (1/1)">
    <groups>
      <group>alt.binaries.test</group>
    </groups>
    <segments>
      <segment bytes="40" number="1">par2-1@example.com</segment>
    </segments>
  </file>
</nzb>
"""

BARE_NZB = """<nzb>
  <file poster="p" date="1" subject="&quot;notes.txt&quot; yEnc (1/1) 12">
    <groups><group>alt.test</group></groups>
    <segments><segment bytes="12" number="1">notes-1@example.com</segment></segments>
  </file>
</nzb>
"""
