"""Terminal UI: events, attributes, colours, borders, tty access, key decoding and the light renderer."""